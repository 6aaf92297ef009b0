"""Logging setup shared by the API server, the client and the CLI.

Everything logs under the ``applytrack`` logger. Plain text is the default;
``configure_logging(json_lines=True)`` switches the console handler to one
JSON object per line for log shippers. Structured events go through
``log_event`` so they read the same in either format.
"""

import json
import logging
import sys
from typing import Any

LOGGER_NAME = "applytrack"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Record attribute carrying a structured event's fields
EVENT_ATTR = "event_fields"

_configured = False


class JsonLineFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
        }
        fields = getattr(record, EVENT_ATTR, None)
        if fields:
            entry.update(fields)
        else:
            entry["message"] = record.getMessage()
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(
    level: str | None = None,
    format_string: str = LOG_FORMAT,
    date_format: str = DATE_FORMAT,
    json_lines: bool = False,
) -> logging.Logger:
    """Configure and return the ``applytrack`` logger.

    Args:
        level: Log level name; INFO when omitted.
        format_string: Text format, ignored when ``json_lines`` is set.
        date_format: Timestamp format for both formatters.
        json_lines: Emit one JSON object per record instead of text.

    Returns:
        The package logger. Calling again only changes levels.
    """
    global _configured

    logger = logging.getLogger(LOGGER_NAME)
    log_level = getattr(logging, (level or "INFO").upper(), logging.INFO)
    logger.setLevel(log_level)

    if _configured:
        for handler in logger.handlers:
            handler.setLevel(log_level)
        return logger

    logger.handlers.clear()
    if json_lines:
        formatter: logging.Formatter = JsonLineFormatter(datefmt=date_format)
    else:
        formatter = logging.Formatter(format_string, datefmt=date_format)
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    # uvicorn installs root handlers; stop records printing twice.
    logger.propagate = False

    _configured = True
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return ``applytrack.<name>``."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def log_event(
    logger: logging.Logger,
    event: str,
    *,
    level: int = logging.INFO,
    exc_info: bool = False,
    **fields: Any,
) -> None:
    """Log a structured event.

    The message text is the event as compact JSON, and the same fields ride
    on the record so ``JsonLineFormatter`` can merge them into its output.
    """
    payload = {"event": event, **fields}
    logger.log(
        level,
        json.dumps(payload, default=str),
        exc_info=exc_info,
        extra={EVENT_ATTR: payload},
    )


def reset_logging() -> None:
    """Undo ``configure_logging`` (used between tests)."""
    global _configured

    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True

    _configured = False
