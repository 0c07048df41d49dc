"""Helpers for consistent application logging."""

from __future__ import annotations

import logging
import os
from typing import Final, Optional

LOGGER_NAME: Final[str] = "retrovault"
PRIMARY_LEVEL_ENV: Final[str] = "RETROVAULT_LOG_LEVEL"
FALLBACK_LEVEL_ENV: Final[str] = "LOG_LEVEL"
LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

# Attributes present on every LogRecord; anything else was passed via ``extra``.
_RESERVED_ATTRS: Final[frozenset[str]] = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


class ExtraFieldsFormatter(logging.Formatter):
    """Formatter that appends ``extra`` fields as sorted ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extras = {
            key: value
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        if not extras:
            return base
        rendered = " ".join(f"{key}={extras[key]!r}" for key in sorted(extras))
        return f"{base} | {rendered}"


def _resolve_log_level() -> int:
    """Return the log level configured via environment variables."""
    raw = os.getenv(PRIMARY_LEVEL_ENV) or os.getenv(FALLBACK_LEVEL_ENV)
    if not raw:
        return logging.INFO

    candidate = raw.strip()
    if not candidate:
        return logging.INFO

    # Support numeric levels and string names (case-insensitive).
    try:
        numeric_level = int(candidate)
    except ValueError:
        level = getattr(logging, candidate.upper(), None)
        if isinstance(level, int):
            return level
    else:
        return numeric_level

    return logging.INFO


def configure_logging() -> logging.Logger:
    """Ensure application logs flow to stdout with sane defaults."""
    logger = logging.getLogger(LOGGER_NAME)
    level = _resolve_log_level()

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(ExtraFieldsFormatter(LOG_FORMAT, DATE_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    for handler in logger.handlers:
        handler.setLevel(level)

    logger.setLevel(level)
    return logger


def get_logger(child: Optional[str] = None) -> logging.Logger:
    """Return a configured logger, optionally for a named child."""
    base = configure_logging()
    return base.getChild(child) if child else base
