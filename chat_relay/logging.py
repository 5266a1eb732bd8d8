"""
Logging configuration for the relay.

Console output is human readable and carries the correlation ID of the HTTP
request or WebSocket session that emitted the line. Errors are also written
as JSON lines to LOG_FILE_PATH, together with the session's log context
(connection_id).
"""

import json
import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import Any

from chat_relay.constants import MAX_LOG_MESSAGE_CHARS
from chat_relay.settings import app_settings

# Per-session (or per-request) fields attached to JSON log lines
log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})

DATE_FMT = "%Y-%m-%d %H:%M:%S"


def get_correlation_id() -> str:
    """Correlation ID of the current request or session, or ''."""
    from chat_relay.middlewares.correlation_id import (
        get_correlation_id as _get_cid,
    )

    return _get_cid()


def set_log_context(**kwargs: Any) -> None:
    """
    Add fields to the JSON log lines of the current context.

    The context is a ContextVar, so every relay session (one asyncio task
    each) sees only its own fields.

    Example:
        >>> set_log_context(connection_id="0b5c...")
        >>> logger.error("Send failed")  # JSON line includes connection_id
    """
    # Publish a new dict; the ContextVar default is shared between tasks
    log_context.set({**log_context.get(), **kwargs})


def get_log_context() -> dict[str, Any]:
    return log_context.get()


def clear_log_context() -> None:
    log_context.set({})


class StructuredJSONFormatter(logging.Formatter):
    """
    One JSON object per record, for the error log file.

    Fields: timestamp, level, logger, location, message, environment, the
    correlation ID when set, the current log context and the formatted
    exception when present. Messages longer than MAX_LOG_MESSAGE_CHARS are
    cut and marked ``[TRUNCATED]``.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if len(message) > MAX_LOG_MESSAGE_CHARS:
            message = message[:MAX_LOG_MESSAGE_CHARS] + "... [TRUNCATED]"

        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, DATE_FMT),
            "level": record.levelname,
            "logger": record.name,
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
            "message": message,
            "environment": app_settings.ENVIRONMENT,
        }

        correlation_id = get_correlation_id()
        if correlation_id:
            entry["correlation_id"] = correlation_id

        entry.update(get_log_context())

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Console formatter.

    INFO lines are short; DEBUG, WARNING and above also show where the line
    was logged from. A '-' stands in for a missing correlation ID.
    """

    SHORT_FMT = "%(asctime)s - [%(correlation_id)s] %(levelname)s: %(message)s"
    LONG_FMT = (
        "%(asctime)s - [%(correlation_id)s] %(levelname)s: "
        "%(module)s.%(funcName)s:%(lineno)d - %(message)s"
    )

    def __init__(self) -> None:
        super().__init__(datefmt=DATE_FMT)
        self._short = logging.Formatter(self.SHORT_FMT, datefmt=DATE_FMT)
        self._long = logging.Formatter(self.LONG_FMT, datefmt=DATE_FMT)

    def format(self, record: logging.LogRecord) -> str:
        record.correlation_id = get_correlation_id() or "-"
        if record.levelno == logging.INFO:
            return self._short.format(record)
        return self._long.format(record)


def setup_logging() -> logging.Logger:
    """
    Configure the root logger and return the relay's logger.

    Installs a console handler (HumanReadableFormatter, LOG_LEVEL) and, when
    the log directory can be created, an ERROR-level JSON file handler at
    LOG_FILE_PATH. Previously installed root handlers are replaced, so
    calling this again does not duplicate output.
    """
    root = logging.getLogger()
    root.setLevel(app_settings.LOG_LEVEL.upper())
    root.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(HumanReadableFormatter())
    root.addHandler(console_handler)

    try:
        log_file = Path(app_settings.LOG_FILE_PATH)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
    except OSError as e:
        root.warning(f"Could not create file handler: {e}")
    else:
        file_handler.setLevel(logging.ERROR)
        file_handler.setFormatter(StructuredJSONFormatter())
        root.addHandler(file_handler)

    return logging.getLogger("chat_relay")


logger = setup_logging()
