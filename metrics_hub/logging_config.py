# metrics_hub/logging_config.py
"""
Traffic Metrics Hub - Centralized Logging Configuration

Features:
- RotatingFileHandler for log file size/count limits
- widget_id field on every record (the widget being recomputed, or '-')
- Consistent format across all modules
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterator

from .config import (
    LOG_LEVEL,
    LOG_FILE,
    LOG_MAX_BYTES,
    LOG_BACKUP_COUNT,
    LOG_FORMAT,
    LOG_DATE_FORMAT,
)

# Context variable for widget tracking
_widget_id: ContextVar[str] = ContextVar("widget_id", default="-")


def get_widget_context() -> str:
    """Get current widget ID from context"""
    return _widget_id.get()


@contextmanager
def widget_context(widget_id: int | str) -> Iterator[str]:
    """
    Tag log records emitted inside the block with a widget ID.

    Usage:
        with widget_context(3):
            logger.info("Recomputing")   # -> "... | widget-3 | ..."
    """
    label = f"widget-{widget_id}"
    token = _widget_id.set(label)
    try:
        yield label
    finally:
        _widget_id.reset(token)


class WidgetContextFilter(logging.Filter):
    """Add widget_id to all log records"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.widget_id = get_widget_context()
        return True


def setup_logging(level: int | str = LOG_LEVEL, log_file: Path | None = LOG_FILE) -> None:
    """
    Initialize logging configuration for the application.

    Call this once at application startup.

    Args:
        level: Logging level (default LOG_LEVEL from the environment)
        log_file: Rotating log file path, or None for console only
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers
    root_logger.handlers.clear()

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
    console_handler.addFilter(WidgetContextFilter())
    root_logger.addHandler(console_handler)

    if log_file is not None:
        # Ensure logs directory exists
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

        # File handler with rotation
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8"
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        file_handler.addFilter(WidgetContextFilter())
        root_logger.addHandler(file_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Usage:
        logger = get_logger(__name__)
        logger.info("Message")
    """
    return logging.getLogger(name)


__all__ = [
    "get_widget_context",
    "widget_context",
    "WidgetContextFilter",
    "setup_logging",
    "get_logger",
]
