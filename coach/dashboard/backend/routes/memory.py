"""
Memory API Routes

Provides endpoints for memory notes and conversation processing:
- GET    /api/memory/notes   - List notes (filters, search, stats)
- POST   /api/memory/notes   - Create a note by hand
- PUT    /api/memory/notes   - Update a note
- DELETE /api/memory/notes   - Delete a note
- POST   /api/memory/extract - Preview extractions for a turn, nothing stored
- POST   /api/memory/process - Extract and store notes for a turn
- GET    /api/memory/process - Pending interactions or processing stats
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from coach.dashboard.backend.auth import get_current_user_id
from coach.dashboard.backend.models import ErrorResponse, MessageResponse
from coach.memory import notes, processor
from coach.memory.extraction.extractor import extract
from coach.memory.extraction.models import ConversationTurn, SettingsContext
from coach.memory.notes import VALID_STATUSES

logger = logging.getLogger(__name__)

router = APIRouter(
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    }
)


# =============================================================================
# Request / Response Models
# =============================================================================


class Note(BaseModel):
    """A stored memory note."""

    id: str
    user_id: str
    title: Optional[str] = None
    content: str
    category: str
    tags: list[str] = Field(default_factory=list)
    priority: int = 0
    status: str = "active"
    source_interaction_id: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: str
    updated_at: Optional[str] = None


class NoteStats(BaseModel):
    total_notes: int
    categories: dict[str, int]
    recent_activity: list[Note]


class NotesResponse(BaseModel):
    notes: list[Note]
    stats: Optional[NoteStats] = None


class NoteResponse(BaseModel):
    note: Note


class NoteCreate(BaseModel):
    """Body for creating a note."""

    content: str
    title: Optional[str] = None
    category: str = "general"
    tags: list[str] = Field(default_factory=list)
    priority: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)


class NoteUpdate(BaseModel):
    """Body for updating a note. Only fields that are sent are changed."""

    id: str
    title: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[list[str]] = None
    priority: Optional[int] = None
    status: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None


class TurnRequest(BaseModel):
    """A conversation turn to analyse."""

    user_message: str = Field(..., description="What the user wrote")
    coach_response: str = Field("", description="The coach's reply, if any")
    coaching_focus: Optional[str] = None
    communication_tone: Optional[str] = None

    def to_turn(self) -> ConversationTurn:
        return ConversationTurn(
            user_message=self.user_message,
            coach_response=self.coach_response,
            settings=self.settings_context(),
        )

    def settings_context(self) -> SettingsContext:
        return SettingsContext(
            coaching_focus=self.coaching_focus,
            communication_tone=self.communication_tone,
        )


class ProcessRequest(TurnRequest):
    force_process: bool = False
    interaction_id: Optional[str] = None


class ProcessResults(BaseModel):
    total_extractions: int
    saved_notes: int
    skipped: int
    notes: list[Note]


class ProcessResponse(BaseModel):
    message: str
    results: ProcessResults


class ExtractResponse(BaseModel):
    extractions: list[dict[str, Any]]
    total: int


def _raise_for_error(result: dict) -> None:
    """Translate a failed data-layer result into an HTTP error."""
    if result.get("success"):
        return
    error = result.get("error", "unknown error")
    status_code = 404 if error == "note not found" else 400
    logger.warning(f"Memory request rejected ({status_code}): {error}")
    raise HTTPException(status_code=status_code, detail=error)


# =============================================================================
# Notes Endpoints
# =============================================================================


@router.get("/notes", response_model=NotesResponse)
async def list_notes(
    category: Optional[str] = Query(None, description="Category filter, 'all' for every category"),
    status: str = Query("active", description="Note status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    search: Optional[str] = Query(None, description="Match against title or content"),
    include_stats: bool = Query(False),
    user_id: str = Depends(get_current_user_id),
):
    """List the caller's memory notes, newest first."""
    result = notes.list_notes(
        user_id=user_id,
        category=category,
        status=status,
        search=search,
        limit=limit,
        offset=offset,
        include_stats=include_stats,
    )
    _raise_for_error(result)
    return NotesResponse(notes=result["data"]["notes"], stats=result["data"]["stats"])


@router.post("/notes", response_model=NoteResponse, status_code=201)
async def create_note(body: NoteCreate, user_id: str = Depends(get_current_user_id)):
    """Create a memory note by hand."""
    result = notes.add_note(
        user_id=user_id,
        content=body.content,
        title=body.title,
        category=body.category,
        tags=body.tags,
        priority=body.priority,
        metadata=body.metadata,
    )
    _raise_for_error(result)
    return NoteResponse(note=result["data"])


@router.put("/notes", response_model=NoteResponse)
async def update_note(body: NoteUpdate, user_id: str = Depends(get_current_user_id)):
    """Update the fields sent in the body."""
    if body.status is not None and body.status not in VALID_STATUSES:
        raise HTTPException(status_code=400, detail=f"invalid status: {body.status}")

    changes = body.model_dump(exclude_unset=True, exclude={"id"})
    result = notes.update_note(body.id, user_id, **changes)
    _raise_for_error(result)
    return NoteResponse(note=result["data"])


@router.delete("/notes", response_model=MessageResponse)
async def delete_note(
    id: str = Query(..., min_length=1, description="Note ID"),
    user_id: str = Depends(get_current_user_id),
):
    """Delete one of the caller's notes."""
    result = notes.delete_note(id, user_id)
    _raise_for_error(result)
    return MessageResponse(message="Note deleted")


# =============================================================================
# Processing Endpoints
# =============================================================================


@router.post("/extract", response_model=ExtractResponse)
async def preview_extraction(body: TurnRequest, user_id: str = Depends(get_current_user_id)):
    """Show what would be remembered from a turn without storing anything."""
    extractions = extract(body.to_turn())
    return ExtractResponse(
        extractions=[e.to_dict() for e in extractions],
        total=len(extractions),
    )


@router.post("/process", response_model=ProcessResponse)
async def process_turn(body: ProcessRequest, user_id: str = Depends(get_current_user_id)):
    """Extract memory notes from a turn and store them."""
    result = processor.process_conversation(
        user_id=user_id,
        user_message=body.user_message,
        coach_response=body.coach_response,
        force_process=body.force_process,
        interaction_id=body.interaction_id,
        settings_context=body.settings_context(),
    )
    _raise_for_error(result)
    return ProcessResponse(message=result["message"], results=result["data"])


@router.get("/process")
async def processing_status(
    process_pending: bool = Query(False, description="List messages not yet processed"),
    limit: int = Query(10, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
):
    """Pending interactions when ``process_pending`` is set, otherwise processing stats."""
    if process_pending:
        result = processor.get_pending_interactions(user_id, limit=limit)
        return {
            "pending_interactions": result["data"]["pending_interactions"],
            "message": result["message"],
        }

    result = processor.get_processing_stats(user_id)
    stats = result["data"]
    return {
        "stats": {
            "total_interactions": stats["total_interactions"],
            "processed_interactions": stats["processed_interactions"],
            "processing_rate": stats["processing_rate"],
        },
        "recent_memories": stats["recent_memories"],
    }
