"""
Logging setup for the API.

Records are JSON lines in production and plain text locally. Structured
context is passed as ``extra={"extra_fields": {...}}``; credential-like
keys in that context are masked before anything is written.
"""
import logging
import sys
import json
from datetime import datetime, timezone
from typing import Any, Dict, Mapping
from core.config import settings

SERVICE_NAME = "bpm-tracker-api"

REDACTED = "[REDACTED]"
SENSITIVE_KEYS = frozenset({
    "password",
    "password_hash",
    "token",
    "access_token",
    "authorization",
    "secret_key",
})


def redact(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy of ``fields`` with credential values masked."""
    return {
        key: REDACTED if key.lower() in SENSITIVE_KEYS else value
        for key, value in fields.items()
    }


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    fields = getattr(record, "extra_fields", None)
    return redact(fields) if fields else {}


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "environment": settings.ENVIRONMENT,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data.update(_extra_fields(record))

        # UUIDs and datetimes in the context are written as strings
        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines for local runs; context appended as key=value."""

    def __init__(self):
        super().__init__("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = _extra_fields(record)
        if fields:
            line += " | " + " ".join(f"{k}={v}" for k, v in fields.items())
        return line


def setup_logging():
    """
    Configure application-wide logging.

    Uses JSON format in production, text format in development.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    if settings.LOG_FORMAT == "json" or settings.ENVIRONMENT == "production":
        formatter = JSONFormatter()
    else:
        formatter = TextFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Request timing is already logged by the middleware in main.py
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return root_logger
