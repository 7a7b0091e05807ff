"""
Messaging Module - WhatsApp conversation plumbing

Components:
    models.py: Interaction dataclass for logged messages
    inbox.py: SQLite log of every message exchanged with the coach
    whatsapp.py: Phone number normalisation for the messaging gateway
    verification.py: Expiring one-time codes for phone verification

Sending messages and generating coach replies are handled by external
services; this package only records and prepares data for them.
"""

from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_PATH = PROJECT_ROOT / "args" / "messaging.yaml"

__all__ = [
    "PROJECT_ROOT",
    "CONFIG_PATH",
]
