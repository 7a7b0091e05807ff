"""Shared test fixtures for Coach Digital tests.

This module provides common fixtures used across all test modules:
- Database isolation with temporary files
- Standard test user data
- Sample conversation turns

Usage:
    def test_something(notes_db):
        # notes_db is the notes module pointed at a temporary database
        ...
"""

import os
import tempfile
from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest


# ─────────────────────────────────────────────────────────────────────────────
# Path Constants
# ─────────────────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).parent.parent
PACKAGE_DIR = PROJECT_ROOT / "coach"


# ─────────────────────────────────────────────────────────────────────────────
# Database Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def temp_db() -> Generator[Path, None, None]:
    """Create a temporary database file for testing.

    The database file is automatically deleted after the test completes.

    Yields:
        Path to the temporary database file
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    yield db_path

    # Cleanup
    if db_path.exists():
        os.unlink(db_path)


@pytest.fixture
def notes_db(temp_db):
    """Patch the notes module to use the temporary database."""
    with patch("coach.memory.notes.DB_PATH", temp_db):
        from coach.memory import notes

        yield notes


@pytest.fixture
def inbox_db(temp_db):
    """Patch the conversation log to use the temporary database."""
    with patch("coach.messaging.inbox.DB_PATH", temp_db):
        from coach.messaging import inbox

        yield inbox


@pytest.fixture
def coach_db(temp_db):
    """Point both the notes store and the conversation log at one temporary database."""
    with (
        patch("coach.memory.notes.DB_PATH", temp_db),
        patch("coach.messaging.inbox.DB_PATH", temp_db),
    ):
        yield temp_db


# ─────────────────────────────────────────────────────────────────────────────
# User Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def mock_user_id() -> str:
    """Standard test user ID."""
    return "test_user_123"


@pytest.fixture
def other_user_id() -> str:
    """A second user, for ownership checks."""
    return "test_user_456"


@pytest.fixture
def mock_phone_number() -> str:
    """Standard test phone number (Colombia)."""
    return "+573001234567"


# ─────────────────────────────────────────────────────────────────────────────
# Conversation Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def goal_message() -> str:
    """User message stating a health goal."""
    return (
        "Quiero empezar a hacer ejercicio 3 veces por semana para mejorar mi salud. "
        "Mi objetivo es perder 5 kilos en 3 meses."
    )


@pytest.fixture
def reminder_message() -> str:
    """User message asking to be reminded of an urgent meeting."""
    return "No olvides recordarme la reunión urgente de mañana con el cliente."


@pytest.fixture
def coach_plan_response() -> str:
    """Coach reply that proposes a plan."""
    return "Te sugiero dividirlo en fases."


@pytest.fixture
def small_talk_messages() -> list:
    """Messages that should never produce a memory note."""
    return ["hola", "gracias", "ok", "sí", "no", "buenas tardes", "thank you", "Perfecto"]
