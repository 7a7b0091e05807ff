"""
Tool: Memory Notes
Purpose: Store the durable notes a user's coach remembers about them

Notes come from two places: the memory processor (extractions from WhatsApp
conversations) and the user adding or editing notes by hand in the web app.
Every note belongs to one user and every query is scoped to that owner.

Usage:
    # Add a note
    python -m coach.memory.notes --action add --user alice \\
        --content "Correr 5 km antes de junio" --category goals --priority 7

    # List active notes, optionally filtered
    python -m coach.memory.notes --action list --user alice --category goals --search correr

    # Update / archive a note
    python -m coach.memory.notes --action update --user alice --id "note_abc" --status archived

    # Delete a note
    python -m coach.memory.notes --action delete --user alice --id "note_abc"

    # Per-category counts
    python -m coach.memory.notes --action stats --user alice

Dependencies:
    - sqlite3 (stdlib)
    - json (stdlib)

Output:
    JSON result with success status and note data
"""

import argparse
import json
import logging
import sqlite3
import sys
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from coach.memory.extraction.models import VALID_CATEGORIES

logger = logging.getLogger(__name__)

# Paths
PROJECT_ROOT = Path(__file__).parent.parent.parent
DB_PATH = PROJECT_ROOT / "data" / "coach.db"

VALID_STATUSES = ["active", "completed", "archived"]
MAX_CONTENT_LENGTH = 5000
MIN_PRIORITY = 0
MAX_PRIORITY = 10

_UPDATABLE_FIELDS = ("title", "content", "category", "tags", "priority", "status", "metadata")


def get_connection() -> sqlite3.Connection:
    """Get database connection, creating tables if needed."""
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(DB_PATH))
    conn.row_factory = sqlite3.Row

    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS memory_notes (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            title TEXT,
            content TEXT NOT NULL,
            category TEXT NOT NULL DEFAULT 'general',
            tags TEXT DEFAULT '[]',
            priority INTEGER DEFAULT 0,
            status TEXT DEFAULT 'active' CHECK(status IN ('active', 'completed', 'archived')),
            source_interaction_id TEXT,
            metadata TEXT DEFAULT '{}',
            created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
            updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """)

    cursor.execute("CREATE INDEX IF NOT EXISTS idx_notes_user ON memory_notes(user_id)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_notes_user_status ON memory_notes(user_id, status)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_notes_category ON memory_notes(category)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_notes_source ON memory_notes(source_interaction_id)")

    conn.commit()
    return conn


def row_to_dict(row) -> Optional[Dict]:
    """Convert sqlite3.Row to a note dict, decoding JSON columns."""
    if row is None:
        return None
    d = dict(row)
    d["tags"] = json.loads(d["tags"]) if d.get("tags") else []
    d["metadata"] = json.loads(d["metadata"]) if d.get("metadata") else {}
    return d


def _escape_like(text: str) -> str:
    """Make % and _ match literally in a LIKE pattern using '\\' as escape."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def generate_note_id() -> str:
    """Generate a unique note ID."""
    return f"note_{uuid.uuid4().hex[:12]}"


def clamp_priority(priority: Any) -> int:
    """Coerce a priority to an int within [0, 10]."""
    try:
        value = int(priority)
    except (TypeError, ValueError):
        value = MIN_PRIORITY
    return max(MIN_PRIORITY, min(MAX_PRIORITY, value))


def _validate_content(content: Optional[str]) -> Optional[str]:
    """Return an error message for invalid content, else None."""
    if not content or not content.strip():
        return "content is required"
    if len(content) > MAX_CONTENT_LENGTH:
        return f"content is too long (max {MAX_CONTENT_LENGTH} characters)"
    return None


def add_note(
    user_id: str,
    content: str,
    title: Optional[str] = None,
    category: str = "general",
    tags: Optional[List[str]] = None,
    priority: int = 0,
    metadata: Optional[Dict[str, Any]] = None,
    source_interaction_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Add a new memory note.

    Args:
        user_id: Owner of the note
        content: Note body (required, max 5000 characters)
        title: Optional short title
        category: One of the memory categories
        tags: List of tags; anything else is stored as []
        priority: Clamped to 0-10
        metadata: Free-form JSON-serializable dict
        source_interaction_id: ID of the logged message this note came from

    Returns:
        dict with success status and note data
    """
    if not user_id:
        return {"success": False, "error": "user_id is required"}

    error = _validate_content(content)
    if error:
        return {"success": False, "error": error}

    if category not in VALID_CATEGORIES:
        return {"success": False, "error": f"invalid category: {category}"}

    note_id = generate_note_id()
    now = datetime.now().isoformat()
    note = {
        "id": note_id,
        "user_id": user_id,
        "title": title.strip() if title and title.strip() else None,
        "content": content.strip(),
        "category": category,
        "tags": tags if isinstance(tags, list) else [],
        "priority": clamp_priority(priority),
        "status": "active",
        "source_interaction_id": source_interaction_id,
        "metadata": metadata or {},
        "created_at": now,
        "updated_at": now,
    }

    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute("""
        INSERT INTO memory_notes
        (id, user_id, title, content, category, tags, priority, status,
         source_interaction_id, metadata, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    """, (
        note["id"],
        note["user_id"],
        note["title"],
        note["content"],
        note["category"],
        json.dumps(note["tags"]),
        note["priority"],
        note["status"],
        note["source_interaction_id"],
        json.dumps(note["metadata"], default=str),
        note["created_at"],
        note["updated_at"],
    ))

    conn.commit()
    conn.close()

    logger.info(f"Memory note {note_id} added for user {user_id} ({category})")

    return {
        "success": True,
        "message": f"Note added for user {user_id}",
        "data": note,
    }


def get_note(note_id: str, user_id: Optional[str] = None) -> Dict[str, Any]:
    """Get a note by ID, optionally scoped to its owner."""
    conn = get_connection()
    cursor = conn.cursor()

    if user_id:
        cursor.execute(
            "SELECT * FROM memory_notes WHERE id = ? AND user_id = ?", (note_id, user_id)
        )
    else:
        cursor.execute("SELECT * FROM memory_notes WHERE id = ?", (note_id,))

    row = cursor.fetchone()
    conn.close()

    if not row:
        return {"success": False, "error": "note not found"}

    return {"success": True, "data": row_to_dict(row)}


def list_notes(
    user_id: str,
    category: Optional[str] = None,
    status: str = "active",
    search: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    include_stats: bool = False,
) -> Dict[str, Any]:
    """
    List a user's notes, newest first.

    Args:
        user_id: Owner
        category: Filter by category ("all" or None for every category)
        status: Filter by status
        search: Case-insensitive match against title or content
        limit: Max results
        offset: Pagination offset
        include_stats: Also return per-category counts of active notes

    Returns:
        dict with notes list and optional stats
    """
    if not user_id:
        return {"success": False, "error": "user_id is required"}

    query = "SELECT * FROM memory_notes WHERE user_id = ? AND status = ?"
    params: List[Any] = [user_id, status]

    if category and category != "all":
        query += " AND category = ?"
        params.append(category)

    if search:
        query += " AND (LOWER(title) LIKE ? ESCAPE '\\' OR LOWER(content) LIKE ? ESCAPE '\\')"
        pattern = f"%{_escape_like(search.lower())}%"
        params.extend([pattern, pattern])

    query += " ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?"
    params.extend([limit, offset])

    conn = get_connection()
    cursor = conn.cursor()
    cursor.execute(query, params)
    notes = [row_to_dict(row) for row in cursor.fetchall()]
    conn.close()

    result: Dict[str, Any] = {
        "success": True,
        "data": {"notes": notes, "total": len(notes), "stats": None},
    }

    if include_stats:
        stats = get_stats(user_id)
        result["data"]["stats"] = {
            "total_notes": stats["data"]["total_notes"],
            "categories": stats["data"]["categories"],
            "recent_activity": notes[:5],
        }

    return result


def update_note(note_id: str, user_id: str, **changes: Any) -> Dict[str, Any]:
    """
    Update the given fields of a note owned by ``user_id``.

    Only title, content, category, tags, priority, status and metadata can be
    changed. Content must stay non-empty; category and status are validated;
    priority is clamped.

    Returns:
        dict with success status and the updated note
    """
    if not note_id:
        return {"success": False, "error": "note id is required"}

    unknown = set(changes) - set(_UPDATABLE_FIELDS)
    if unknown:
        return {"success": False, "error": f"cannot update fields: {sorted(unknown)}"}

    updates: Dict[str, Any] = {}

    if "title" in changes:
        title = changes["title"]
        updates["title"] = title.strip() if title and title.strip() else None

    if "content" in changes:
        error = _validate_content(changes["content"])
        if error:
            return {"success": False, "error": error}
        updates["content"] = changes["content"].strip()

    if "category" in changes:
        if changes["category"] not in VALID_CATEGORIES:
            return {"success": False, "error": f"invalid category: {changes['category']}"}
        updates["category"] = changes["category"]

    if "tags" in changes:
        tags = changes["tags"]
        updates["tags"] = json.dumps(tags if isinstance(tags, list) else [])

    if "priority" in changes:
        updates["priority"] = clamp_priority(changes["priority"])

    if "status" in changes:
        if changes["status"] not in VALID_STATUSES:
            return {"success": False, "error": f"invalid status: {changes['status']}"}
        updates["status"] = changes["status"]

    if "metadata" in changes:
        updates["metadata"] = json.dumps(changes["metadata"] or {}, default=str)

    existing = get_note(note_id, user_id=user_id)
    if not existing["success"]:
        return existing

    if not updates:
        return {"success": True, "message": "Nothing to update", "data": existing["data"]}

    updates["updated_at"] = datetime.now().isoformat()
    assignments = ", ".join(f"{column} = ?" for column in updates)

    conn = get_connection()
    cursor = conn.cursor()
    cursor.execute(
        f"UPDATE memory_notes SET {assignments} WHERE id = ? AND user_id = ?",
        (*updates.values(), note_id, user_id),
    )
    conn.commit()
    conn.close()

    return {
        "success": True,
        "message": f"Note {note_id} updated",
        "data": get_note(note_id, user_id=user_id)["data"],
    }


def delete_note(note_id: str, user_id: str) -> Dict[str, Any]:
    """Delete a note owned by ``user_id``."""
    if not note_id:
        return {"success": False, "error": "note id is required"}

    conn = get_connection()
    cursor = conn.cursor()
    cursor.execute("DELETE FROM memory_notes WHERE id = ? AND user_id = ?", (note_id, user_id))
    deleted = cursor.rowcount
    conn.commit()
    conn.close()

    if not deleted:
        return {"success": False, "error": "note not found"}

    logger.info(f"Memory note {note_id} deleted for user {user_id}")
    return {"success": True, "message": "Note deleted"}


def get_stats(user_id: str) -> Dict[str, Any]:
    """Count a user's active notes per category."""
    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute("""
        SELECT category, COUNT(*) as count FROM memory_notes
        WHERE user_id = ? AND status = 'active'
        GROUP BY category
    """, (user_id,))
    categories = {row["category"]: row["count"] for row in cursor.fetchall()}
    conn.close()

    return {
        "success": True,
        "data": {
            "total_notes": sum(categories.values()),
            "categories": categories,
        },
    }


def get_recent_notes(user_id: str, limit: int = 5) -> List[Dict[str, Any]]:
    """Most recently created notes of any status."""
    conn = get_connection()
    cursor = conn.cursor()
    cursor.execute(
        "SELECT * FROM memory_notes WHERE user_id = ? ORDER BY created_at DESC, rowid DESC LIMIT ?",
        (user_id, limit),
    )
    notes = [row_to_dict(row) for row in cursor.fetchall()]
    conn.close()
    return notes


def has_note_for_interaction(interaction_id: str) -> bool:
    """Check whether any note was created from the given logged message."""
    conn = get_connection()
    cursor = conn.cursor()
    cursor.execute(
        "SELECT 1 FROM memory_notes WHERE source_interaction_id = ? LIMIT 1", (interaction_id,)
    )
    found = cursor.fetchone() is not None
    conn.close()
    return found


def count_processed_interactions(user_id: str) -> int:
    """Number of distinct logged messages that produced at least one note."""
    conn = get_connection()
    cursor = conn.cursor()
    cursor.execute("""
        SELECT COUNT(DISTINCT source_interaction_id) as count FROM memory_notes
        WHERE user_id = ? AND source_interaction_id IS NOT NULL
    """, (user_id,))
    count = cursor.fetchone()["count"]
    conn.close()
    return count


def main():
    parser = argparse.ArgumentParser(
        description="Memory notes storage",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--action", required=True,
                        choices=["add", "list", "get", "update", "delete", "stats"],
                        help="Action to perform")
    parser.add_argument("--user", help="User ID")
    parser.add_argument("--id", help="Note ID")
    parser.add_argument("--title", help="Note title")
    parser.add_argument("--content", help="Note content")
    parser.add_argument("--category", help="Note category")
    parser.add_argument("--tags", help="Comma-separated tags")
    parser.add_argument("--priority", type=int, help="Priority 0-10")
    parser.add_argument("--status", choices=VALID_STATUSES, help="Note status")
    parser.add_argument("--search", help="Search text for list")
    parser.add_argument("--limit", type=int, default=50, help="Max results")
    parser.add_argument("--offset", type=int, default=0, help="Pagination offset")

    args = parser.parse_args()

    if not args.user:
        print(f"Error: --user required for {args.action}")
        sys.exit(1)

    if args.action in ("get", "update", "delete") and not args.id:
        print(f"Error: --id required for {args.action}")
        sys.exit(1)

    tags = [t.strip() for t in args.tags.split(",") if t.strip()] if args.tags else None

    if args.action == "add":
        if not args.content:
            print("Error: --content required for add")
            sys.exit(1)

        result = add_note(
            user_id=args.user,
            content=args.content,
            title=args.title,
            category=args.category or "general",
            tags=tags,
            priority=args.priority or 0,
        )

    elif args.action == "list":
        result = list_notes(
            user_id=args.user,
            category=args.category,
            status=args.status or "active",
            search=args.search,
            limit=args.limit,
            offset=args.offset,
        )

    elif args.action == "get":
        result = get_note(args.id, user_id=args.user)

    elif args.action == "update":
        changes = {
            name: value
            for name, value in (
                ("title", args.title),
                ("content", args.content),
                ("category", args.category),
                ("tags", tags),
                ("priority", args.priority),
                ("status", args.status),
            )
            if value is not None
        }
        result = update_note(args.id, args.user, **changes)

    elif args.action == "delete":
        result = delete_note(args.id, args.user)

    elif args.action == "stats":
        result = get_stats(args.user)

    if result.get("success"):
        print(f"OK {result.get('message', 'Success')}")
    else:
        print(f"ERROR {result.get('error')}")
        sys.exit(1)

    print(json.dumps(result, indent=2, default=str))


if __name__ == "__main__":
    main()
