"""Tests for coach/memory/extraction/gate.py

The gate decides whether a user message is worth remembering and which
category it belongs to. Key behaviors:
- Greetings and one-word acknowledgements are never stored
- Keyword categories are tested in a fixed order, first match wins
- Substantial content needs two of three signals
- Coach replies are scanned for plan/next-step phrases
"""

import pytest

from coach.memory.extraction.gate import (
    CATEGORY_DETECTORS,
    coach_suggests_action,
    contains_emotional_content,
    contains_goal_keywords,
    contains_idea_keywords,
    contains_project_keywords,
    contains_reminder_keywords,
    detect_category,
    is_greeting_or_small_talk,
    is_substantial_content,
)
from coach.memory.extraction.models import MemoryCategory


# ─────────────────────────────────────────────────────────────────────────────
# Small Talk Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestGreetingDetection:
    """Tests for is_greeting_or_small_talk."""

    @pytest.mark.parametrize(
        "message",
        ["hola", "hey", "buenos días", "buenas noches", "gracias", "thank you",
         "vale", "genial", "sí", "si", "no", "quizás"],
    )
    def test_detects_small_talk(self, message):
        """Should flag whole-message greetings and acknowledgements."""
        assert is_greeting_or_small_talk(message) is True

    def test_is_case_insensitive(self):
        """Should match regardless of case."""
        assert is_greeting_or_small_talk("HOLA") is True
        assert is_greeting_or_small_talk("Perfecto") is True

    def test_requires_whole_message(self):
        """A greeting followed by content is not small talk."""
        assert is_greeting_or_small_talk("hola, quiero hablar de mi proyecto") is False
        assert is_greeting_or_small_talk("gracias por la ayuda de ayer") is False


# ─────────────────────────────────────────────────────────────────────────────
# Keyword Detector Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestKeywordDetectors:
    """Tests for the per-category keyword scans."""

    def test_goal_keywords(self):
        assert contains_goal_keywords("mi meta es correr un maratón") is True
        assert contains_goal_keywords("aspiro a dirigir el equipo") is True
        assert contains_goal_keywords("hoy llovió todo el día") is False

    def test_reminder_keywords(self):
        assert contains_reminder_keywords("tengo que pagar la luz") is True
        assert contains_reminder_keywords("que no se me olvide el regalo") is True
        assert contains_reminder_keywords("ayer fui al cine") is False

    def test_idea_keywords(self):
        assert contains_idea_keywords("se me ocurre abrir un blog") is True
        assert contains_idea_keywords("me di cuenta de algo") is True
        assert contains_idea_keywords("comí pasta") is False

    def test_project_keywords(self):
        assert contains_project_keywords("estoy construyendo una app") is True
        assert contains_project_keywords("mi startup crece") is True
        assert contains_project_keywords("salí a caminar") is False

    def test_emotional_keywords(self):
        assert contains_emotional_content("me siento cansado") is True
        assert contains_emotional_content("tengo mucha ansiedad") is True
        assert contains_emotional_content("el tren llegó tarde") is False

    def test_keywords_match_inside_words(self):
        """Keywords are substrings, not whole words."""
        assert contains_reminder_keywords("no quiero recordarlo") is True


class TestCoachSuggestsAction:
    """Tests for coach reply scanning."""

    @pytest.mark.parametrize(
        "response",
        ["te sugiero dividirlo en fases.", "recomiendo que descanses",
         "plan: tres sesiones", "estos son los próximos pasos", "te propongo algo"],
    )
    def test_detects_action_phrases(self, response):
        assert coach_suggests_action(response) is True

    def test_ignores_plain_replies(self):
        assert coach_suggests_action("qué bien, me alegro mucho") is False
        assert coach_suggests_action("") is False


# ─────────────────────────────────────────────────────────────────────────────
# Substantial Content Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestSubstantialContent:
    """Tests for the two-of-three substantiality test."""

    def test_long_punctuated_text_is_substantial(self):
        message = "el fin de semana visité a mi familia en el campo, fue muy bonito."
        assert is_substantial_content(message) is True

    def test_letters_and_punctuation_are_enough(self):
        """Short text still passes with letters plus punctuation."""
        assert is_substantial_content("vi una película.") is True

    def test_letters_alone_are_not_enough(self):
        assert is_substantial_content("vi una película") is False

    def test_digits_and_symbols_only(self):
        assert is_substantial_content("123 456 !!!") is False

    def test_thresholds_are_configurable(self):
        message = "uno dos tres cuatro"
        assert is_substantial_content(message, word_count=3) is True
        assert is_substantial_content(message, min_signals=1) is True
        assert is_substantial_content("vi una película.", min_signals=3) is False


# ─────────────────────────────────────────────────────────────────────────────
# Category Order Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestDetectCategory:
    """Tests for first-match-wins classification."""

    def test_detector_order(self):
        """Categories are checked goals, reminders, ideas, projects, feelings."""
        assert [category for category, _ in CATEGORY_DETECTORS] == [
            MemoryCategory.GOALS,
            MemoryCategory.REMINDERS,
            MemoryCategory.IDEAS,
            MemoryCategory.PROJECTS,
            MemoryCategory.FEELINGS,
        ]

    @pytest.mark.parametrize(
        "message, expected",
        [
            ("quiero recordar llamar a mamá mañana", MemoryCategory.GOALS),
            ("tengo que avanzar con el proyecto", MemoryCategory.REMINDERS),
            ("tengo una idea para el proyecto", MemoryCategory.IDEAS),
            ("mi equipo está motivado", MemoryCategory.PROJECTS),
            ("me siento tranquilo", MemoryCategory.FEELINGS),
        ],
    )
    def test_first_match_wins(self, message, expected):
        assert detect_category(message) == expected

    def test_no_keywords(self):
        assert detect_category("el clima de hoy es agradable") is None
