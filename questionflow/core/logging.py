"""Logging configuration for questionflow.

This module sets up a structured logging configuration using
``logging.config.dictConfig``. Every record carries the id of the flow session
being driven, taken from a context variable, and output uses key-value
formatting to facilitate downstream parsing.
"""

from __future__ import annotations

import logging
import logging.config
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

# ---------------------------------------------------------------------------
# Context variable used to propagate the active session ID to log records
# ---------------------------------------------------------------------------
session_id_ctx_var: ContextVar[str | None] = ContextVar("session_id", default=None)


class SessionIdFilter(logging.Filter):
    """Inject the session ID from contextvars into log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - small
        record.session_id = session_id_ctx_var.get() or "-"
        return True


def _build_config(log_level: str) -> dict[str, Any]:
    """Build logging configuration dictionary."""

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"session_id": {"()": SessionIdFilter}},
        "formatters": {
            "kv": {
                "format": (
                    "level=%(levelname)s logger=%(name)s session_id=%(session_id)s "
                    "message=%(message)s"
                )
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "formatter": "kv",
                "filters": ["session_id"],
                "level": log_level,
            }
        },
        "root": {"handlers": ["default"], "level": log_level},
    }


def setup_logging(log_level: str | None = None) -> None:
    """Configure root logging using key-value formatting.

    The level defaults to ``LOG_LEVEL`` from the application settings.
    """
    if log_level is None:
        from questionflow.settings import get_settings

        log_level = get_settings().log_level
    logging.config.dictConfig(_build_config(log_level.upper()))


@contextmanager
def session_log_context(session_id: str | None) -> Iterator[None]:
    """Tag every log record emitted inside the block with ``session_id``."""
    token = session_id_ctx_var.set(session_id)
    try:
        yield
    finally:
        session_id_ctx_var.reset(token)


__all__ = ["SessionIdFilter", "session_id_ctx_var", "session_log_context", "setup_logging"]
