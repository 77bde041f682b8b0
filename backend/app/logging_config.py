"""
Structured JSON logging configuration (Monolog-style).

Every log line is a single JSON object on stdout with a channel name,
the current request ID and business context (user_id, reviewer_id, ...).

Channels:
- http:      request lifecycle (middleware, routes)
- students:  student service operations
- reference: class/section catalog lookups
- db:        repository writes
- notify:    account verification emails
- auth:      caller identity resolution
"""

import logging
import json
import os
import uuid
from datetime import datetime, timezone
from contextvars import ContextVar

# Request ID of the HTTP request currently being served; set by the
# middleware in app.main and read by the formatter for every log entry.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CHANNELS = ["http", "db", "students", "reference", "notify", "auth"]


class StructuredJsonFormatter(logging.Formatter):
    """
    Formats a LogRecord as one JSON object:

        {"timestamp", "level", "message", "channel", "context", "extra"}

    When the record carries exception info, the exception type and message
    are added under "error". Tracebacks stay out of the entry so that
    responses and logs never disagree about what was exposed.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "message": record.getMessage(),
            "channel": getattr(record, "channel", record.name.split(".")[-1] if "." in record.name else "app"),
            "context": {
                "request_id": request_id_var.get(""),
                **(getattr(record, "context", {}) or {})
            },
            "extra": getattr(record, "extra_data", {}) or {}
        }
        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            entry["error"] = {"type": type(exc).__name__, "message": str(exc)}
        return json.dumps(entry, default=str)


def setup_logging():
    """
    Install the JSON formatter on the root logger and set the level of
    each channel logger. Safe to call more than once.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredJsonFormatter())

    level = getattr(logging, LOG_LEVEL, logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    for channel in CHANNELS:
        logging.getLogger(f"app.{channel}").setLevel(level)

    return root_logger


def get_logger(channel: str) -> logging.Logger:
    """Return the logger for a channel (http, db, students, ...)."""
    return logging.getLogger(f"app.{channel}")


def log_with_context(logger: logging.Logger, level: str, message: str,
                     context: dict = None, extra_data: dict = None,
                     exc_info=None):
    """
    Emit a structured log entry.

    Args:
        logger: Channel logger from get_logger()
        level: Level name (DEBUG, INFO, WARNING, ERROR)
        message: Human-readable message
        context: Business identifiers (user_id, reviewer_id, email)
        extra_data: Metadata such as duration_ms or filter values
        exc_info: Exception to attach under "error"
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.log(
        log_level,
        message,
        exc_info=exc_info,
        extra={"context": context or {}, "extra_data": extra_data or {}, "channel": logger.name.split(".")[-1]}
    )


def generate_request_id() -> str:
    """Generate a new UUID for request tracking."""
    return str(uuid.uuid4())
