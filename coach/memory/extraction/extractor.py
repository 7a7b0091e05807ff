"""
Memory Extractor - Turn a conversation turn into memory note candidates

Runs two independent analyses over a ConversationTurn:

1. The user message is filtered (too short, greetings), classified by the
   category gate, and turned into at most one extraction with a title, tags,
   priority and category-specific metadata.
2. The coach reply is scanned for action-suggestion phrases; when it proposes
   a plan, the reply itself becomes a follow-up reminder.

The user-derived extraction always comes first. The two are never merged.

extract() is pure: no I/O, no shared state, same output for the same turn.
Thresholds live in ExtractionSettings; load_settings() reads overrides from
args/memory.yaml for callers that want them configurable.

Usage:
    from coach.memory.extraction.extractor import extract
    from coach.memory.extraction.models import ConversationTurn

    extractions = extract(ConversationTurn(
        user_message="No olvides recordarme la reunión urgente de mañana",
        coach_response="Te sugiero preparar la agenda hoy.",
    ))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from coach.memory.extraction import CONFIG_PATH
from coach.memory.extraction.fields import (
    calculate_priority,
    clamp_priority,
    extract_date_mention,
    extract_emotional_state,
    extract_project_status,
    extract_tags,
    extract_title,
)
from coach.memory.extraction.gate import (
    coach_suggests_action,
    detect_category,
    is_greeting_or_small_talk,
    is_substantial_content,
)
from coach.memory.extraction.models import (
    ConversationTurn,
    MemoryCategory,
    MemoryExtraction,
)

logger = logging.getLogger(__name__)

COACH_PLAN_TITLE = "Plan sugerido por el coach"
COACH_PLAN_TAGS = ["plan_coach", "seguimiento"]
COACH_PLAN_PRIORITY = 7
COACH_PLAN_CONTEXT = "plan_del_coach"

# metadata.context value recorded for each category
CATEGORY_CONTEXTS = {
    MemoryCategory.GOALS: "objetivo_mencionado_por_usuario",
    MemoryCategory.REMINDERS: "recordatorio_solicitado",
    MemoryCategory.IDEAS: "idea_compartida",
    MemoryCategory.PROJECTS: "proyecto_mencionado",
    MemoryCategory.FEELINGS: "estado_emocional",
    MemoryCategory.GENERAL: "conversacion_general",
}


@dataclass(frozen=True)
class ExtractionSettings:
    """
    Tunable thresholds for the extractor.

    The defaults reproduce the production heuristics. Override them in the
    ``memory_extraction`` section of args/memory.yaml.
    """
    min_message_length: int = 10
    general_min_length: int = 50
    substantial_word_count: int = 10
    substantial_min_signals: int = 2
    title_max_length: int = 50
    general_priority: int = 3
    min_priority: int = 1
    max_priority: int = 10


DEFAULT_SETTINGS = ExtractionSettings()


def load_settings(config_path: Path | None = None) -> ExtractionSettings:
    """
    Load extraction thresholds from YAML.

    Reads the ``memory_extraction`` section of args/memory.yaml. Unknown keys
    are ignored; a missing file yields the defaults.
    """
    path = config_path or CONFIG_PATH
    if not path.exists():
        return DEFAULT_SETTINGS

    with open(path, "r") as f:
        config = yaml.safe_load(f) or {}

    section: dict[str, Any] = config.get("memory_extraction", {}) or {}
    known = {field_info.name for field_info in fields(ExtractionSettings)}
    overrides = {k: int(v) for k, v in section.items() if k in known}

    ignored = set(section) - known
    if ignored:
        logger.warning(f"Ignoring unknown memory_extraction settings: {sorted(ignored)}")

    return ExtractionSettings(**overrides)


def analyze_user_message(
    turn: ConversationTurn,
    settings: ExtractionSettings = DEFAULT_SETTINGS,
) -> MemoryExtraction | None:
    """Classify the user side of a turn, or return None if nothing to keep."""
    original = turn.user_message or ""
    message = original.lower().strip()

    if len(message) < settings.min_message_length or is_greeting_or_small_talk(message):
        return None

    category = detect_category(message)

    if category is None:
        if len(message) > settings.general_min_length and is_substantial_content(
            message,
            word_count=settings.substantial_word_count,
            min_signals=settings.substantial_min_signals,
        ):
            return MemoryExtraction(
                should_store=True,
                category=MemoryCategory.GENERAL,
                title=extract_title(original, MemoryCategory.GENERAL, settings.title_max_length),
                content=original,
                tags=extract_tags(original, MemoryCategory.GENERAL),
                priority=clamp_priority(
                    settings.general_priority, settings.min_priority, settings.max_priority
                ),
                metadata={"context": CATEGORY_CONTEXTS[MemoryCategory.GENERAL]},
            )
        return None

    metadata = {"context": CATEGORY_CONTEXTS[category]}

    if category is MemoryCategory.GOALS:
        deadline = extract_date_mention(original)
        if deadline:
            metadata["goalDeadline"] = deadline
    elif category is MemoryCategory.REMINDERS:
        reminder_date = extract_date_mention(original)
        if reminder_date:
            metadata["reminderDate"] = reminder_date
    elif category is MemoryCategory.PROJECTS:
        metadata["projectStatus"] = extract_project_status(original)
    elif category is MemoryCategory.FEELINGS:
        metadata["emotionalState"] = extract_emotional_state(original)

    return MemoryExtraction(
        should_store=True,
        category=category,
        title=extract_title(original, category, settings.title_max_length),
        content=original,
        tags=extract_tags(original, category),
        priority=calculate_priority(
            original, category, settings.min_priority, settings.max_priority
        ),
        metadata=metadata,
    )


def analyze_coach_response(turn: ConversationTurn) -> MemoryExtraction | None:
    """Turn a coach reply that proposes a plan into a follow-up reminder."""
    response = turn.coach_response or ""
    if not coach_suggests_action(response.lower()):
        return None

    metadata = {"context": COACH_PLAN_CONTEXT}
    reminder_date = extract_date_mention(response)
    if reminder_date:
        metadata["reminderDate"] = reminder_date

    return MemoryExtraction(
        should_store=True,
        category=MemoryCategory.REMINDERS,
        title=COACH_PLAN_TITLE,
        content=response,
        tags=[MemoryCategory.REMINDERS.value, *COACH_PLAN_TAGS],
        priority=COACH_PLAN_PRIORITY,
        metadata=metadata,
    )


def extract(
    turn: ConversationTurn,
    settings: ExtractionSettings | None = None,
) -> list[MemoryExtraction]:
    """
    Produce the memory note candidates for one conversation turn.

    Args:
        turn: The user message and optional coach reply
        settings: Thresholds; defaults reproduce production behavior

    Returns:
        Zero to two extractions, user-derived before coach-derived
    """
    settings = settings or DEFAULT_SETTINGS
    extractions: list[MemoryExtraction] = []

    user_extraction = analyze_user_message(turn, settings)
    if user_extraction is not None:
        extractions.append(user_extraction)

    coach_extraction = analyze_coach_response(turn)
    if coach_extraction is not None:
        extractions.append(coach_extraction)

    logger.debug(
        f"Extracted {len(extractions)} memory candidates: "
        f"{[e.category.value for e in extractions]}"
    )
    return extractions
