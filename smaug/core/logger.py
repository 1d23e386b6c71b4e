"""Logging setup for the Smaug bookmark archiver.

Two output formats share one set of loggers:
- ConsoleFormatter: the human-readable per-bookmark trace (default)
- JSONFormatter: one JSON object per line, for log shippers

Both render the ``bookmark_id`` attached by BookmarkLoggerAdapter so every
line of a bookmark's trace can be tied back to it.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# LogRecord attributes that are not user-provided extras
_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    }
)


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Return the fields passed via ``extra=`` on a logging call."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_ATTRS
    }


class JSONFormatter(logging.Formatter):
    """Formats log records as JSON objects.

    Output format:
        {
            "ts": "2026-01-23T10:30:00.123456+00:00",
            "level": "INFO",
            "msg": "Resolved category",
            "logger": "smaug.core.pipeline",
            "bookmark_id": "123456789",
            ...extra fields...
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="microseconds"),
            "level": record.levelname,
            "msg": record.getMessage(),
        }

        if record.name and record.name != "root":
            log_entry["logger"] = record.name

        log_entry.update(_extra_fields(record))

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable trace: ``LEVEL  [bookmark_id] message``."""

    def format(self, record: logging.LogRecord) -> str:
        bookmark_id = getattr(record, "bookmark_id", None)
        prefix = f"[{bookmark_id}] " if bookmark_id else ""
        line = f"{record.levelname:<7} {prefix}{record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class BookmarkLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds bookmark_id to every record.

    Usage:
        logger = get_bookmark_logger(__name__, bookmark.id)
        logger.info("Processing")  # record.bookmark_id == bookmark.id
    """

    def __init__(self, logger: logging.Logger, bookmark_id: str):
        super().__init__(logger, {"bookmark_id": bookmark_id})

    def process(
        self, msg: str, kwargs: dict[str, Any]
    ) -> tuple[str, dict[str, Any]]:
        extra = kwargs.get("extra", {})
        extra["bookmark_id"] = self.extra["bookmark_id"]
        kwargs["extra"] = extra
        return msg, kwargs


def setup_logging(
    level: str = "INFO",
    *,
    json_format: bool = False,
    stream: Any = None,
) -> None:
    """Configure the root logger.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: Emit JSON lines instead of the console trace.
        stream: Output stream (defaults to sys.stderr).
    """
    if stream is None:
        stream = sys.stderr

    root_logger = logging.getLogger()

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(JSONFormatter() if json_format else ConsoleFormatter())

    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger instance (root logger when name is None)."""
    return logging.getLogger(name)


def get_bookmark_logger(name: str, bookmark_id: str) -> BookmarkLoggerAdapter:
    """Get a logger adapter that includes bookmark_id in all messages.

    Example:
        logger = get_bookmark_logger(__name__, bookmark.id)
        logger.info("Skipping duplicate")
        # Console: INFO    [123] Skipping duplicate
    """
    return BookmarkLoggerAdapter(get_logger(name), bookmark_id)


def reset_logging() -> None:
    """Remove all handlers from the root logger.

    Useful for testing to ensure clean state between tests.
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
