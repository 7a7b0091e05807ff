"""
Tool: Memory Processor
Purpose: Turn WhatsApp conversation turns into stored memory notes

Glue between the conversation log, the extractor and the notes store:

    message logged -> extract(turn) -> notes.add_note() for each keeper

Extraction itself is pure; everything with side effects lives here. A note
that fails to save is logged and counted, never raised, so one bad write does
not lose the rest of the turn.

Usage:
    # Process a turn without logging it
    python -m coach.memory.processor --action process --user alice \\
        --message "Quiero correr un maratón este año" \\
        --response "Te sugiero empezar con 3 salidas por semana"

    # Messages that have not produced a note yet
    python -m coach.memory.processor --action pending --user alice

    # Processing rate
    python -m coach.memory.processor --action stats --user alice
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from typing import Any, Dict, Optional

from coach.memory import notes
from coach.memory.extraction.extractor import ExtractionSettings, extract
from coach.memory.extraction.models import ConversationTurn, SettingsContext
from coach.messaging import inbox

logger = logging.getLogger(__name__)


def process_conversation(
    user_id: str,
    user_message: str,
    coach_response: str = "",
    force_process: bool = False,
    interaction_id: Optional[str] = None,
    settings_context: Optional[SettingsContext] = None,
    settings: Optional[ExtractionSettings] = None,
    manual: bool = True,
) -> Dict[str, Any]:
    """
    Extract memory notes from one turn and store them.

    Args:
        user_id: Owner of the notes
        user_message: What the user wrote (required)
        coach_response: The coach's reply, if any
        force_process: Store every extraction even if it is not flagged for storage
        interaction_id: Logged message the notes are traced back to
        settings_context: User's coaching focus and tone
        settings: Extraction thresholds
        manual: Recorded as processed_manually; False when called from ingest_turn

    Returns:
        dict with extraction/save/skip counts and the saved notes
    """
    if not user_id:
        return {"success": False, "error": "user_id is required"}
    if not user_message or not user_message.strip():
        return {"success": False, "error": "user_message is required"}

    turn = ConversationTurn(
        user_message=user_message,
        coach_response=coach_response or "",
        settings=settings_context,
    )
    extractions = extract(turn, settings)

    saved_notes = []
    skipped = 0

    for extraction in extractions:
        if not (extraction.should_store or force_process):
            skipped += 1
            continue

        result = notes.add_note(
            user_id=user_id,
            content=extraction.content,
            title=extraction.title,
            category=extraction.category.value,
            tags=extraction.tags,
            priority=extraction.priority,
            source_interaction_id=interaction_id,
            metadata={
                **extraction.metadata,
                "processed_manually": manual,
                "processed_at": datetime.now().isoformat(),
                "ai_processed": True,
            },
        )

        if result["success"]:
            saved_notes.append(result["data"])
        else:
            logger.error(f"Error saving memory note for user {user_id}: {result['error']}")

    logger.info(
        f"Processed turn for user {user_id}: {len(extractions)} extractions, "
        f"{len(saved_notes)} saved, {skipped} skipped"
    )

    return {
        "success": True,
        "message": "Processing complete",
        "data": {
            "total_extractions": len(extractions),
            "saved_notes": len(saved_notes),
            "skipped": skipped,
            "notes": saved_notes,
        },
    }


def ingest_turn(
    user_id: str,
    user_message: str,
    coach_response: str = "",
    phone_number: Optional[str] = None,
    message_sid: Optional[str] = None,
    settings_context: Optional[SettingsContext] = None,
) -> Dict[str, Any]:
    """
    Log both sides of a WhatsApp turn and extract notes from it.

    The stored user message becomes the source interaction of every note.
    """
    stored = inbox.store_message(
        user_id=user_id,
        content=user_message,
        sender="user",
        phone_number=phone_number,
        message_sid=message_sid,
    )
    if not stored["success"]:
        return stored

    if coach_response:
        reply = inbox.store_message(
            user_id=user_id,
            content=coach_response,
            sender="coach",
            phone_number=phone_number,
        )
        if not reply["success"]:
            logger.warning(f"Could not log coach reply for user {user_id}: {reply['error']}")

    result = process_conversation(
        user_id=user_id,
        user_message=user_message,
        coach_response=coach_response,
        interaction_id=stored["data"]["id"],
        settings_context=settings_context,
        manual=False,
    )
    if result["success"]:
        result["data"]["interaction_id"] = stored["data"]["id"]
    return result


def get_pending_interactions(user_id: str, limit: int = 10) -> Dict[str, Any]:
    """Recent user messages that no note has been created from yet."""
    recent = inbox.list_messages(user_id, sender="user", limit=limit)

    pending = [
        {
            "id": message.id,
            "content": message.content,
            "created_at": message.created_at.isoformat(),
            "processed": False,
        }
        for message in recent
        if not notes.has_note_for_interaction(message.id)
    ]

    return {
        "success": True,
        "message": f"{len(pending)} interactions pending processing",
        "data": {"pending_interactions": pending},
    }


def get_processing_stats(user_id: str) -> Dict[str, Any]:
    """Share of a user's messages that have produced notes."""
    total = inbox.count_messages(user_id, sender="user")
    processed = notes.count_processed_interactions(user_id)

    return {
        "success": True,
        "data": {
            "total_interactions": total,
            "processed_interactions": processed,
            "processing_rate": round(processed / total * 100) if total else 0,
            "recent_memories": notes.get_recent_notes(user_id, limit=5),
        },
    }


def main():
    parser = argparse.ArgumentParser(description="Memory processor")
    parser.add_argument("--action", required=True, choices=["process", "ingest", "pending", "stats"])
    parser.add_argument("--user", required=True, help="User ID")
    parser.add_argument("--message", help="User message")
    parser.add_argument("--response", default="", help="Coach response")
    parser.add_argument("--force", action="store_true", help="Store every extraction")
    parser.add_argument("--limit", type=int, default=10, help="Max pending interactions")

    args = parser.parse_args()

    if args.action in ("process", "ingest") and not args.message:
        print(f"Error: --message required for {args.action}")
        sys.exit(1)

    if args.action == "process":
        result = process_conversation(
            args.user, args.message, coach_response=args.response, force_process=args.force
        )
    elif args.action == "ingest":
        result = ingest_turn(args.user, args.message, coach_response=args.response)
    elif args.action == "pending":
        result = get_pending_interactions(args.user, limit=args.limit)
    else:
        result = get_processing_stats(args.user)

    if result.get("success"):
        print(f"OK {result.get('message', 'Success')}")
    else:
        print(f"ERROR {result.get('error')}")
        sys.exit(1)

    print(json.dumps(result, indent=2, default=str))


if __name__ == "__main__":
    main()
