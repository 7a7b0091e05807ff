"""
Field Extractors - Title, tags, priority and metadata for memory notes

Each helper reads the original (not lower-cased) message text and returns one
field of a MemoryExtraction. Keyword scans are plain substring checks; the
title and date helpers use short regexes with bounded repetition, so every
helper runs in linear time and none of them can raise on arbitrary input.
"""

from __future__ import annotations

import re

from coach.memory.extraction.models import MemoryCategory

DEFAULT_TITLE_LENGTH = 50

# Lead-in phrase followed by the text that becomes the title
_TITLE_PATTERNS: dict[MemoryCategory, re.Pattern] = {
    MemoryCategory.GOALS: re.compile(r"(quiero|mi objetivo es|mi meta es)\s+(.{1,50})", re.I),
    MemoryCategory.REMINDERS: re.compile(r"(recordar|recuérdame|tengo que|debo)\s+(.{1,50})", re.I),
    MemoryCategory.IDEAS: re.compile(r"(idea|se me ocurre|pienso que)\s+(.{1,50})", re.I),
    MemoryCategory.PROJECTS: re.compile(r"(proyecto|trabajando en|desarrollando)\s+(.{1,50})", re.I),
    MemoryCategory.FEELINGS: re.compile(r"(me siento|estoy)\s+(.{1,30})", re.I),
}

# Used when the lead-in phrase is missing; None means "truncated message"
_TITLE_FALLBACKS: dict[MemoryCategory, str | None] = {
    MemoryCategory.GOALS: None,
    MemoryCategory.REMINDERS: None,
    MemoryCategory.IDEAS: "Nueva idea",
    MemoryCategory.PROJECTS: "Proyecto mencionado",
    MemoryCategory.FEELINGS: "Estado emocional",
    MemoryCategory.GENERAL: None,
}

_DOMAIN_TAGS: dict[MemoryCategory, list[tuple[tuple[str, ...], str]]] = {
    MemoryCategory.GOALS: [
        (("ejercicio", "fitness"), "salud"),
        (("trabajo", "carrera"), "profesional"),
        (("dinero", "financiero"), "finanzas"),
    ],
    MemoryCategory.PROJECTS: [
        (("personal",), "personal"),
        (("trabajo",), "trabajo"),
        (("startup", "negocio"), "emprendimiento"),
    ],
}

_URGENCY_WORDS = ("urgente", "importante")

BASE_PRIORITY = {
    MemoryCategory.GOALS: 7,
    MemoryCategory.REMINDERS: 6,
    MemoryCategory.FEELINGS: 4,
}
DEFAULT_BASE_PRIORITY = 5

# (words, bonus); every row that matches adds its bonus
_PRIORITY_ADJUSTMENTS = [
    (("urgente", "hoy"), 2),
    (("importante", "prioridad"), 1),
    (("mañana", "esta semana"), 1),
]

# Tested in order, first match wins
_DATE_PATTERNS = [
    re.compile(r"mañana", re.I),
    re.compile(r"pasado mañana", re.I),
    re.compile(r"la próxima semana", re.I),
    re.compile(r"el próximo (lunes|martes|miércoles|jueves|viernes|sábado|domingo)", re.I),
    re.compile(r"en (\d+) días?", re.I),
    re.compile(r"(\d{1,2})/(\d{1,2})"),
    re.compile(r"(enero|febrero|marzo|abril|mayo|junio|julio|agosto|septiembre|octubre|noviembre|diciembre)", re.I),
]

_PROJECT_STATUSES = [
    (("empezando", "iniciando"), "iniciado"),
    (("progreso", "avanzando"), "en_progreso"),
    (("terminando", "finalizando"), "finalizando"),
    (("terminé", "completé"), "completado"),
]
DEFAULT_PROJECT_STATUS = "activo"

# Order matters: the first emotion with a matching keyword is reported
EMOTIONS = [
    ("feliz", ["feliz", "contento", "alegre", "bien", "genial"]),
    ("triste", ["triste", "deprimido", "bajo", "mal"]),
    ("ansioso", ["ansioso", "nervioso", "preocupado", "estresado"]),
    ("motivado", ["motivado", "energético", "entusiasmado", "inspirado"]),
    ("frustrado", ["frustrado", "molesto", "irritado", "enojado"]),
]
DEFAULT_EMOTIONAL_STATE = "neutral"


def truncate(message: str, max_length: int = DEFAULT_TITLE_LENGTH) -> str:
    """Cut a message to ``max_length`` characters, marking the cut with '...'."""
    if len(message) > max_length:
        return message[:max_length] + "..."
    return message


def extract_title(message: str, category: MemoryCategory, max_length: int = DEFAULT_TITLE_LENGTH) -> str:
    """
    Build a short title for a note.

    Looks for the category's lead-in phrase ("quiero", "tengo que", ...) and
    keeps what follows it up to the first period. Falls back to a fixed label
    or to the truncated message.
    """
    pattern = _TITLE_PATTERNS.get(category)
    if pattern is not None:
        match = pattern.search(message)
        if match:
            title = match.group(2).strip().split(".")[0]
            if title:
                if category is MemoryCategory.FEELINGS:
                    return f"Estado: {title}"
                return title

    fallback = _TITLE_FALLBACKS.get(category)
    if fallback is not None:
        return fallback
    return truncate(message, max_length)


def extract_tags(message: str, category: MemoryCategory) -> list[str]:
    """Category name, then any domain tags, then 'urgente' if flagged."""
    tags = [category.value]

    for words, tag in _DOMAIN_TAGS.get(category, []):
        if any(word in message for word in words):
            tags.append(tag)

    if any(word in message for word in _URGENCY_WORDS):
        tags.append("urgente")

    return tags


def calculate_priority(
    message: str,
    category: MemoryCategory,
    min_priority: int = 1,
    max_priority: int = 10,
) -> int:
    """Category base score plus additive urgency bonuses, clamped."""
    priority = BASE_PRIORITY.get(category, DEFAULT_BASE_PRIORITY)

    for words, bonus in _PRIORITY_ADJUSTMENTS:
        if any(word in message for word in words):
            priority += bonus

    return clamp_priority(priority, min_priority, max_priority)


def clamp_priority(priority: int, min_priority: int = 1, max_priority: int = 10) -> int:
    return min(max_priority, max(min_priority, priority))


def extract_date_mention(message: str) -> str | None:
    """
    Return the first date-like phrase in a message, verbatim.

    Recognises "mañana", "la próxima semana", "el próximo <día>",
    "en N días", D/M dates and month names.

    Examples:
        >>> extract_date_mention("Lo veo el próximo viernes")
        'el próximo viernes'
    """
    for pattern in _DATE_PATTERNS:
        match = pattern.search(message)
        if match:
            return match.group(0)
    return None


def extract_project_status(message: str) -> str:
    for words, status in _PROJECT_STATUSES:
        if any(word in message for word in words):
            return status
    return DEFAULT_PROJECT_STATUS


def extract_emotional_state(message: str) -> str:
    for emotion, keywords in EMOTIONS:
        if any(keyword in message for keyword in keywords):
            return emotion
    return DEFAULT_EMOTIONAL_STATE
