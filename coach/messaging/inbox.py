"""
Tool: Conversation Log
Purpose: Store every WhatsApp message exchanged between users and the coach

Usage:
    python -m coach.messaging.inbox --action history --user-id alice --limit 20
    python -m coach.messaging.inbox --action list --user-id alice --sender user
    python -m coach.messaging.inbox --action count --user-id alice

Database: data/coach.db (table whatsapp_interactions)
"""

import argparse
import json
import logging
import sqlite3
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

from coach.messaging.models import VALID_SENDERS, Interaction

logger = logging.getLogger(__name__)


PROJECT_ROOT = Path(__file__).parent.parent.parent

# Database path
DB_PATH = PROJECT_ROOT / "data" / "coach.db"


def get_connection() -> sqlite3.Connection:
    """Get database connection, creating tables if needed."""
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(DB_PATH))
    conn.row_factory = sqlite3.Row

    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS whatsapp_interactions (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            phone_number TEXT,
            message_type TEXT NOT NULL CHECK(message_type IN ('incoming', 'outgoing')),
            sender TEXT NOT NULL CHECK(sender IN ('user', 'coach')),
            content TEXT NOT NULL,
            message_sid TEXT,
            metadata TEXT,
            created_at DATETIME NOT NULL
        )
    """)

    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_interactions_user ON whatsapp_interactions(user_id, created_at)"
    )
    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_interactions_sender ON whatsapp_interactions(user_id, sender)"
    )

    conn.commit()
    return conn


# =============================================================================
# Message Operations
# =============================================================================


def store_message(
    user_id: str,
    content: str,
    sender: str,
    phone_number: str | None = None,
    message_sid: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Log a message.

    Args:
        user_id: Owner of the conversation
        content: Message text
        sender: 'user' or 'coach'
        phone_number: User's phone number
        message_sid: Gateway ID of an inbound message
        metadata: Extra data; a logging timestamp is always added

    Returns:
        {"success": True, "data": dict} or {"success": False, "error": str}
    """
    if not user_id:
        return {"success": False, "error": "user_id is required"}
    if sender not in VALID_SENDERS:
        return {"success": False, "error": f"invalid sender: {sender}"}

    interaction = Interaction(
        id=Interaction.generate_id(),
        user_id=user_id,
        sender=sender,
        content=content,
        phone_number=phone_number,
        message_sid=message_sid,
        metadata={"timestamp": datetime.now().isoformat(), **(metadata or {})},
    )

    conn = get_connection()
    cursor = conn.cursor()

    try:
        cursor.execute(
            """
            INSERT INTO whatsapp_interactions
            (id, user_id, phone_number, message_type, sender, content, message_sid, metadata, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
            (
                interaction.id,
                interaction.user_id,
                interaction.phone_number,
                interaction.message_type,
                interaction.sender,
                interaction.content,
                interaction.message_sid,
                json.dumps(interaction.metadata, default=str),
                interaction.created_at.isoformat(),
            ),
        )
        conn.commit()
        return {"success": True, "data": interaction.to_dict()}

    except sqlite3.IntegrityError as e:
        return {"success": False, "error": f"integrity_error: {e}"}
    finally:
        conn.close()


def get_conversation_history(user_id: str, limit: int = 20) -> list[Interaction]:
    """
    Last ``limit`` messages of a conversation, oldest first.

    Args:
        user_id: Owner of the conversation
        limit: Maximum messages to return

    Returns:
        List of Interaction objects in chronological order
    """
    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute(
        """
        SELECT * FROM whatsapp_interactions
        WHERE user_id = ?
        ORDER BY created_at DESC, rowid DESC
        LIMIT ?
    """,
        (user_id, limit),
    )

    rows = cursor.fetchall()
    conn.close()

    return [_row_to_interaction(row) for row in reversed(rows)]


def list_messages(user_id: str, sender: str | None = None, limit: int = 10) -> list[Interaction]:
    """Most recent messages of a conversation, newest first."""
    conn = get_connection()
    cursor = conn.cursor()

    if sender:
        cursor.execute(
            """
            SELECT * FROM whatsapp_interactions
            WHERE user_id = ? AND sender = ?
            ORDER BY created_at DESC, rowid DESC
            LIMIT ?
        """,
            (user_id, sender, limit),
        )
    else:
        cursor.execute(
            """
            SELECT * FROM whatsapp_interactions
            WHERE user_id = ?
            ORDER BY created_at DESC, rowid DESC
            LIMIT ?
        """,
            (user_id, limit),
        )

    rows = cursor.fetchall()
    conn.close()

    return [_row_to_interaction(row) for row in rows]


def count_messages(user_id: str, sender: str | None = None) -> int:
    conn = get_connection()
    cursor = conn.cursor()

    if sender:
        cursor.execute(
            "SELECT COUNT(*) as count FROM whatsapp_interactions WHERE user_id = ? AND sender = ?",
            (user_id, sender),
        )
    else:
        cursor.execute(
            "SELECT COUNT(*) as count FROM whatsapp_interactions WHERE user_id = ?", (user_id,)
        )

    count = cursor.fetchone()["count"]
    conn.close()
    return count


def _row_to_interaction(row: sqlite3.Row) -> Interaction:
    return Interaction(
        id=row["id"],
        user_id=row["user_id"],
        sender=row["sender"],
        content=row["content"],
        phone_number=row["phone_number"],
        message_sid=row["message_sid"],
        created_at=datetime.fromisoformat(row["created_at"]),
        metadata=json.loads(row["metadata"]) if row["metadata"] else {},
    )


def main():
    parser = argparse.ArgumentParser(description="WhatsApp conversation log")
    parser.add_argument("--action", required=True, choices=["history", "list", "count"])
    parser.add_argument("--user-id", required=True, help="User ID")
    parser.add_argument("--sender", choices=VALID_SENDERS, help="Filter by sender")
    parser.add_argument("--limit", type=int, default=20, help="Max messages")

    args = parser.parse_args()

    if args.action == "history":
        messages = get_conversation_history(args.user_id, limit=args.limit)
        result = {"success": True, "messages": [m.to_dict() for m in messages]}
    elif args.action == "list":
        messages = list_messages(args.user_id, sender=args.sender, limit=args.limit)
        result = {"success": True, "messages": [m.to_dict() for m in messages]}
    else:
        result = {"success": True, "count": count_messages(args.user_id, sender=args.sender)}

    print(json.dumps(result, indent=2, default=str))
    sys.exit(0 if result.get("success") else 1)


if __name__ == "__main__":
    main()
