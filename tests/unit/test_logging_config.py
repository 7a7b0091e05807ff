"""Tests for coach/logging_config.py"""

import io
import json
import logging

import pytest

from coach.logging_config import bind_user_context, clear_user_context, setup_logging


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way pytest configured it."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level

    yield

    clear_user_context()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    def test_json_lines(self, restore_root_logger):
        stream = io.StringIO()
        setup_logging(level="INFO", json_output=True, stream=stream)

        logging.getLogger("coach.test").info("Nota guardada para María")

        record = json.loads(stream.getvalue().strip())
        assert record["event"] == "Nota guardada para María"
        assert record["level"] == "info"
        assert record["logger"] == "coach.test"
        assert "timestamp" in record

    def test_level_filters(self, restore_root_logger):
        stream = io.StringIO()
        setup_logging(level="WARNING", json_output=True, stream=stream)

        logging.getLogger("coach.test").info("hidden")
        assert stream.getvalue() == ""

    def test_user_context(self, restore_root_logger):
        stream = io.StringIO()
        setup_logging(level="INFO", json_output=True, stream=stream)

        bind_user_context("alice")
        logging.getLogger("coach.test").info("with user")

        assert json.loads(stream.getvalue().strip())["user_id"] == "alice"

    def test_env_defaults(self, restore_root_logger, monkeypatch):
        monkeypatch.setenv("COACH_LOG_LEVEL", "ERROR")
        monkeypatch.setenv("COACH_LOG_FORMAT", "json")
        stream = io.StringIO()
        setup_logging(stream=stream)

        logging.getLogger("coach.test").warning("hidden")
        logging.getLogger("coach.test").error("shown")

        assert json.loads(stream.getvalue().strip())["event"] == "shown"
