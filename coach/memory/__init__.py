"""
Memory Module - What the coach remembers about each user

Components:
    - extraction/: Rule-based classification of conversation turns into
      memory note candidates (goals, reminders, ideas, projects, feelings)
    - notes.py: SQLite storage for memory notes, manual or extracted
    - processor.py: Runs extraction on conversation turns and stores the results
"""

from .notes import (
    add_note,
    delete_note,
    get_note,
    get_stats,
    list_notes,
    update_note,
)
from .processor import (
    get_pending_interactions,
    get_processing_stats,
    ingest_turn,
    process_conversation,
)

__all__ = [
    "add_note",
    "delete_note",
    "get_note",
    "get_stats",
    "list_notes",
    "update_note",
    "get_pending_interactions",
    "get_processing_stats",
    "ingest_turn",
    "process_conversation",
]
