"""Structured logging configuration for the Doorkeeper feed worker.

- JSON structured logging with StructuredFormatter
- Logger hierarchy under the doorkeeper namespace
- Environment variable control (DOORKEEPER_LOG_LEVEL, DOORKEEPER_LOG_FORMAT)
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Optional

# Keys redacted from log context. Access tokens of the acting account must
# never reach the log stream.
SENSITIVE_KEYS = {
    "password", "token", "secret", "apikey", "api_key",
    "authorization", "credential", "access_token", "bearer",
}

ROOT_LOGGER = "doorkeeper"

_STANDARD_FIELDS = {
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
    "message",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "thread",
    "threadName",
    "exc_info",
    "exc_text",
    "stack_info",
    "taskName",
}


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter.

    Outputs logs in JSON format with:
    - timestamp: UTC ISO 8601 format with 'Z' suffix
    - level: Log level name (INFO, ERROR, etc.)
    - logger: Logger name (doorkeeper hierarchy)
    - message: Log message (snake_case event name)
    - context: Extras dict merged from LogRecord attributes

    Sensitive keys are redacted before serialization.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: LogRecord to format

        Returns:
            JSON string with structured log data
        """
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = {
            k: ("[REDACTED]" if k.lower() in SENSITIVE_KEYS else v)
            for k, v in record.__dict__.items()
            if k not in _STANDARD_FIELDS and not k.startswith("_")
        }

        if extras:
            log_data["context"] = extras

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter for local runs (DOORKEEPER_LOG_FORMAT=text)."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def configure_logging(level: Optional[str] = None) -> None:
    """Configure structured logging for all doorkeeper loggers.

    Args:
        level: Optional log level override. If not provided, uses
               DOORKEEPER_LOG_LEVEL environment variable (default: INFO).

    Environment Variables:
        DOORKEEPER_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR). Default: INFO
        DOORKEEPER_LOG_FORMAT: Output format (json, text). Default: json
    """
    if level is None:
        level = os.getenv("DOORKEEPER_LOG_LEVEL", "INFO")

    log_level = getattr(logging, level.upper(), logging.INFO)

    log_format = os.getenv("DOORKEEPER_LOG_FORMAT", "json").lower()

    if log_format == "text":
        formatter = TextFormatter()
    else:
        formatter = StructuredFormatter()

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)

    # Only add a handler once; configure_logging runs on every package import
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    else:
        for handler in logger.handlers:
            handler.setFormatter(formatter)

    # Prevent propagation to avoid duplicate logs under a configured root logger
    logger.propagate = False
