"""
Tool: Messaging Models
Purpose: Data structures for logged WhatsApp interactions

Usage:
    from coach.messaging.models import Interaction

Every message exchanged with a user, in either direction, is logged as an
Interaction so the memory processor can later trace notes back to the message
they came from.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Dict, Any, Optional
import uuid

VALID_SENDERS = ("user", "coach")


@dataclass
class Interaction:
    """
    One logged message between a user and the coach.

    Attributes:
        id: Internal message UUID
        user_id: Owner of the conversation
        sender: Who wrote it ('user' | 'coach')
        content: Text content of the message
        phone_number: User's phone number, without the whatsapp: prefix
        message_sid: Gateway message ID for inbound messages
        created_at: When the message was logged
        metadata: Extra data from the gateway or the processor
    """
    id: str
    user_id: str
    sender: str                  # 'user' | 'coach'
    content: str
    phone_number: Optional[str] = None
    message_sid: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def message_type(self) -> str:
        """'incoming' for user messages, 'outgoing' for coach replies."""
        return "incoming" if self.sender == "user" else "outgoing"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        d = asdict(self)
        d["created_at"] = self.created_at.isoformat()
        d["message_type"] = self.message_type
        return d

    @staticmethod
    def generate_id() -> str:
        """Generate a new interaction ID."""
        return str(uuid.uuid4())
