"""Structured JSON logging with correlation ids and PII redaction."""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
import re
import time
import uuid
from typing import Any, Dict, Iterator

CORRELATION_ID: contextvars.ContextVar[str | None] = contextvars.ContextVar("correlation_id", default=None)

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRIBUTES = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message"}
_REDACT_KEYS = frozenset(
    {"user_id", "email", "image_url", "image_urls", "cover_image_url", "description"}
)
_EMAIL_PATTERN = re.compile(r"[\w.\-]+@[\w.\-]+")


class JsonFormatter(logging.Formatter):
    """One JSON object per record, extras included and scrubbed."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
            "event": getattr(record, "event", message),
            "correlation_id": getattr(record, "correlation_id", None) or CORRELATION_ID.get(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRIBUTES and key not in payload:
                payload[key] = redact_for_log(value)
        return json.dumps(payload)


def configure_logging(level: int | str = "INFO") -> None:
    """Set the root level and attach a single JSON handler."""

    root = logging.getLogger()
    root.setLevel(level.upper() if isinstance(level, str) else level)
    if not any(isinstance(handler.formatter, JsonFormatter) for handler in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        root.addHandler(handler)


def redact_for_log(payload: Any) -> Any:
    """Recursively scrub user identifiers, photo URLs, emails and free-text notes."""

    if isinstance(payload, str):
        if _EMAIL_PATTERN.search(payload):
            return _EMAIL_PATTERN.sub("[redacted-email]", payload)
        return "[redacted-url]" if payload.lower().startswith("http") else payload
    if payload is None or isinstance(payload, (int, float, bool)):
        return payload
    if isinstance(payload, (list, tuple, set, frozenset)):
        return [redact_for_log(item) for item in payload]
    if isinstance(payload, dict):
        return {
            str(key): "[redacted]" if key in _REDACT_KEYS else redact_for_log(value)
            for key, value in payload.items()
        }
    return str(payload)


def ensure_correlation_id(correlation_id: str | None = None) -> str:
    """Return the active correlation id, setting ``correlation_id`` or a fresh one if needed."""

    if correlation_id or not CORRELATION_ID.get():
        CORRELATION_ID.set(correlation_id or uuid.uuid4().hex)
    return CORRELATION_ID.get()  # type: ignore[return-value]


@contextlib.contextmanager
def correlation_context(correlation_id: str | None = None) -> Iterator[str]:
    token = CORRELATION_ID.set(correlation_id or CORRELATION_ID.get() or uuid.uuid4().hex)
    try:
        yield CORRELATION_ID.get()  # type: ignore[misc]
    finally:
        CORRELATION_ID.reset(token)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Log ``event`` with redacted ``fields`` attached as record extras."""

    correlation_id = ensure_correlation_id(fields.pop("correlation_id", None))
    exc_info = fields.pop("exc_info", None)
    logger.log(
        level,
        event,
        exc_info=exc_info,
        extra={"event": event, "correlation_id": correlation_id, **redact_for_log(fields)},
    )


@contextlib.contextmanager
def operation_context(name: str, logger: logging.Logger) -> Iterator[str]:
    """Scope a correlation id around one operation and log its duration at DEBUG."""

    start = time.perf_counter()
    with correlation_context() as correlation_id:
        try:
            yield correlation_id
        finally:
            log_event(
                logger,
                logging.DEBUG,
                "operation_finished",
                operation=name,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )


__all__ = [
    "JsonFormatter",
    "configure_logging",
    "correlation_context",
    "ensure_correlation_id",
    "log_event",
    "redact_for_log",
    "operation_context",
]
