"""
Logging setup for the API and the CLI.

Modules log through ``logging.getLogger(__name__)``. setup_logging() routes
those records through structlog processors, so each line carries a level,
logger name, ISO timestamp and any request context bound with
bind_user_context(). Output is console-formatted by default and one JSON
object per line with COACH_LOG_FORMAT=json.

Usage:
    from coach.logging_config import bind_user_context, setup_logging

    setup_logging()
    bind_user_context("alice")   # later records include user_id=alice
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

import structlog

DEFAULT_LEVEL = "INFO"

# Chatty third-party loggers capped at WARNING unless debugging
NOISY_LOGGERS = ("uvicorn.access", "httpx")


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(json_output: bool) -> structlog.types.Processor:
    if json_output:
        # Keep accented characters unescaped
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer()


def setup_logging(
    level: str | None = None,
    json_output: bool | None = None,
    stream: IO[str] | None = None,
) -> None:
    """
    Configure the root logger.

    Args:
        level: Log level name (default: COACH_LOG_LEVEL or INFO)
        json_output: JSON lines instead of console output
            (default: COACH_LOG_FORMAT == "json")
        stream: Where to write (default: stderr)
    """
    level = level or os.environ.get("COACH_LOG_LEVEL", DEFAULT_LEVEL)
    if json_output is None:
        json_output = os.environ.get("COACH_LOG_FORMAT", "").lower() == "json"

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    shared = _shared_processors()

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(json_output),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def bind_user_context(user_id: str) -> None:
    """Attach ``user_id`` to every record logged in the current context."""
    structlog.contextvars.bind_contextvars(user_id=user_id)


def clear_user_context() -> None:
    structlog.contextvars.clear_contextvars()


__all__ = ["bind_user_context", "clear_user_context", "setup_logging"]
