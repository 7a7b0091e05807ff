"""
Category Gate - Keyword detection for memory extraction

Decides whether a user message is worth remembering and, if so, which
category it belongs to. Every check is a plain substring or anchored regex
scan over the lower-cased message, so a turn is classified in time linear in
its length without any model call.

Categories are tested in a fixed order and the first match wins. The order is
the CATEGORY_DETECTORS list itself, so callers and tests can enumerate it.

Usage:
    from coach.memory.extraction.gate import detect_category, is_greeting_or_small_talk

    message = text.lower().strip()
    if not is_greeting_or_small_talk(message):
        category = detect_category(message)
"""

from __future__ import annotations

import re
import logging
from typing import Callable

from coach.memory.extraction.models import MemoryCategory

logger = logging.getLogger(__name__)


# =============================================================================
# Keyword Sets
# =============================================================================

_GREETING_PATTERNS = [
    re.compile(r"^(?:hola|hi|hello|hey|buenas|buenos días|buenas tardes|buenas noches)$", re.I),
    re.compile(r"^(?:gracias|thank you|ok|vale|perfecto|genial)$", re.I),
    re.compile(r"^(?:sí|si|no|maybe|quizás)$", re.I),
]

GOAL_KEYWORDS = [
    "quiero", "mi objetivo", "mi meta", "propósito", "lograr", "conseguir",
    "alcanzar", "planear", "objetivo de", "meta de", "aspiro", "busco",
    "pretendo", "espero lograr", "mi plan es",
]

REMINDER_KEYWORDS = [
    "recordar", "no olvides", "recuérdame", "tengo que", "debo",
    "necesito hacer", "mañana", "la próxima semana", "el lunes",
    "recordatorio", "avísame", "que no se me olvide",
]

IDEA_KEYWORDS = [
    "se me ocurre", "tengo una idea", "qué tal si", "podría", "pienso que",
    "se me ocurrió", "una idea sería", "tal vez podríamos", "insight",
    "reflexión", "me di cuenta",
]

PROJECT_KEYWORDS = [
    "proyecto", "trabajando en", "desarrollando", "construyendo",
    "creando", "iniciativa", "emprendimiento", "startup", "negocio",
    "colaboración", "equipo",
]

EMOTIONAL_KEYWORDS = [
    "me siento", "estoy", "me encuentro", "emocionalmente", "ansiedad",
    "estrés", "feliz", "triste", "frustrado", "motivado", "desanimado",
    "preocupado", "entusiasmado", "nervioso", "relajado",
]

# Phrases a coach uses when proposing a plan the user should follow up on
COACH_ACTION_PHRASES = [
    "te sugiero", "recomiendo que", "podrías", "sería bueno que",
    "vamos a", "plan:", "próximos pasos", "te propongo",
]


def _contains_any(message: str, keywords: list[str]) -> bool:
    return any(keyword in message for keyword in keywords)


# =============================================================================
# Detectors
# =============================================================================


def is_greeting_or_small_talk(message: str) -> bool:
    """Check if the whole message is a greeting or a one-word acknowledgement."""
    return any(p.match(message) for p in _GREETING_PATTERNS)


def contains_goal_keywords(message: str) -> bool:
    """Check for intent or aspiration ("quiero", "mi meta", ...)."""
    return _contains_any(message, GOAL_KEYWORDS)


def contains_reminder_keywords(message: str) -> bool:
    """Check for a future obligation or a request to be reminded."""
    return _contains_any(message, REMINDER_KEYWORDS)


def contains_idea_keywords(message: str) -> bool:
    """Check for an emergent thought or insight."""
    return _contains_any(message, IDEA_KEYWORDS)


def contains_project_keywords(message: str) -> bool:
    """Check for mentions of ongoing work."""
    return _contains_any(message, PROJECT_KEYWORDS)


def contains_emotional_content(message: str) -> bool:
    """Check for a report of emotional state."""
    return _contains_any(message, EMOTIONAL_KEYWORDS)


def coach_suggests_action(response: str) -> bool:
    """Check if a coach reply proposes a plan or next step."""
    return _contains_any(response, COACH_ACTION_PHRASES)


def is_substantial_content(message: str, word_count: int = 10, min_signals: int = 2) -> bool:
    """
    Check that a message is more than a quick question or reply.

    Counts three signals: more than ``word_count`` words, any punctuation
    (period or comma), and any letters. At least ``min_signals`` must hold.
    """
    signals = [
        len(message.split(" ")) > word_count,
        "." in message or "," in message,
        re.search(r"[a-zA-Z]", message) is not None,
    ]
    return sum(signals) >= min_signals


# Evaluated top to bottom; a message gets the first category that matches.
CATEGORY_DETECTORS: list[tuple[MemoryCategory, Callable[[str], bool]]] = [
    (MemoryCategory.GOALS, contains_goal_keywords),
    (MemoryCategory.REMINDERS, contains_reminder_keywords),
    (MemoryCategory.IDEAS, contains_idea_keywords),
    (MemoryCategory.PROJECTS, contains_project_keywords),
    (MemoryCategory.FEELINGS, contains_emotional_content),
]


def detect_category(message: str) -> MemoryCategory | None:
    """
    Return the first keyword category matching a lower-cased message.

    The ``general`` fallback is not decided here since it depends on length
    thresholds; see ``coach.memory.extraction.extractor``.
    """
    for category, predicate in CATEGORY_DETECTORS:
        if predicate(message):
            logger.debug(f"Message matched category {category.value}")
            return category
    return None
