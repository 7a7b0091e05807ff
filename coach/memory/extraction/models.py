"""
Memory Extraction Models

Value objects passed in and out of the extractor. A ConversationTurn is built
by the caller per message and a MemoryExtraction is a candidate memory note;
neither has identity or lifecycle of its own.

Usage:
    from coach.memory.extraction.models import ConversationTurn, MemoryCategory

    turn = ConversationTurn(user_message="Quiero correr un maratón")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class MemoryCategory(str, Enum):
    """Kinds of durable information a memory note can hold."""
    GOALS = "goals"
    REMINDERS = "reminders"
    IDEAS = "ideas"
    PROJECTS = "projects"
    FEELINGS = "feelings"
    INSIGHTS = "insights"
    GENERAL = "general"


VALID_CATEGORIES = [c.value for c in MemoryCategory]


@dataclass(frozen=True)
class SettingsContext:
    """
    Coaching preferences of the user sending the turn.

    Carried through for callers that want them alongside the turn; the
    extractor does not condition classification on either label.
    """
    coaching_focus: str | None = None
    communication_tone: str | None = None


@dataclass(frozen=True)
class ConversationTurn:
    """One user message, optionally paired with the coach's reply."""
    user_message: str
    coach_response: str = ""
    settings: SettingsContext | None = None


@dataclass
class MemoryExtraction:
    """
    A candidate memory note derived from a conversation turn.

    Attributes:
        should_store: Whether the caller should persist this note
        category: Exactly one MemoryCategory
        title: Short label, may be None
        content: Verbatim source text
        tags: Category name first, then domain/urgency tags
        priority: 1-10
        metadata: ``context`` plus one optional category-specific key
            (reminderDate, goalDeadline, projectStatus, emotionalState)
    """
    should_store: bool
    category: MemoryCategory
    content: str
    title: str | None = None
    tags: list[str] = field(default_factory=list)
    priority: int = 5
    metadata: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape used by the API."""
        return {
            "shouldStore": self.should_store,
            "category": self.category.value,
            "title": self.title,
            "content": self.content,
            "tags": list(self.tags),
            "priority": self.priority,
            "metadata": dict(self.metadata),
        }
