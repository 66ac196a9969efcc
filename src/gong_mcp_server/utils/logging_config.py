"""Logging configuration for the Gong MCP server.

stdout carries the MCP stdio transport, so every handler writes to stderr.
Structured output is one JSON object per line; fields passed through
``ContextLogger`` land at the top level of that object.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

ROOT_LOGGER_NAME = "gong_mcp_server"

# Extra fields that may carry Gong credentials
REDACTED_FIELDS = frozenset({"access_key", "access_key_secret", "authorization"})
REDACTED = "***"

# Third-party loggers that log every request URL at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


def redact(fields: dict[str, Any]) -> dict[str, Any]:
    """Mask credential-bearing fields before they reach a handler."""
    return {
        key: REDACTED if key.lower() in REDACTED_FIELDS else value
        for key, value in fields.items()
    }


class StructuredFormatter(logging.Formatter):
    """Formats records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            log_data.update(redact(extra_fields))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(level: str = "INFO", structured: bool = True) -> None:
    """Configure the package logger.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        structured: Emit JSON lines instead of plain text
    """
    log_level = getattr(logging, level.upper())

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    if structured:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(log_level)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.propagate = False

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


class ContextLogger:
    """Logger wrapper that attaches default context to every record.

    ``bind`` returns a child carrying extra context, e.g. the call id for
    everything logged while resolving one call's speakers.
    """

    def __init__(self, name: str, context: dict[str, Any] | None = None):
        self.logger = logging.getLogger(name)
        self.context = context or {}

    def _fields(self, extra: dict[str, Any] | None) -> dict[str, Any]:
        return {"extra_fields": {**self.context, **(extra or {})}}

    def bind(self, **context: Any) -> "ContextLogger":
        return ContextLogger(self.logger.name, {**self.context, **context})

    def debug(self, msg: str, extra: dict[str, Any] | None = None) -> None:
        self.logger.debug(msg, extra=self._fields(extra))

    def info(self, msg: str, extra: dict[str, Any] | None = None) -> None:
        self.logger.info(msg, extra=self._fields(extra))

    def warning(self, msg: str, extra: dict[str, Any] | None = None) -> None:
        self.logger.warning(msg, extra=self._fields(extra))

    def error(
        self, msg: str, extra: dict[str, Any] | None = None, exc_info: bool = False
    ) -> None:
        """Log at ERROR, optionally with the active exception's traceback."""
        self.logger.error(msg, extra=self._fields(extra), exc_info=exc_info)
