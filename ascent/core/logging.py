"""
Structured logging with run ID support.

Features:
- JSON logs in production, pretty logs in development.
- Context-bound run_id to correlate every line of one load/apply/save cycle.
- log_event helper for consistent structured logs with safe truncation.
"""

import json
import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Dict, Iterator, Optional
from uuid import uuid4

run_id_ctx_var: ContextVar[Optional[str]] = ContextVar("run_id", default=None)

_STRUCTURED_FIELDS = ("event_type", "habit_id", "error_code")


def get_run_id(default: Optional[str] = None) -> Optional[str]:
    """Fetch the current run_id from context (if any)."""
    rid = run_id_ctx_var.get()
    return rid if rid is not None else default


@contextmanager
def bind_run_id(run_id: Optional[str] = None) -> Iterator[str]:
    """Bind a run_id for the duration of the block, generating one if needed."""
    rid = run_id or uuid4().hex[:12]
    token = run_id_ctx_var.set(rid)
    try:
        yield rid
    finally:
        run_id_ctx_var.reset(token)


def _format_timestamp(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace('+00:00', 'Z')


class RunIdFilter(logging.Filter):
    """Inject run_id into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "run_id", None) is None:
            record.run_id = get_run_id()
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": _format_timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": getattr(record, "run_id", None),
        }
        for key in _STRUCTURED_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        return json.dumps(payload, default=str)


class PrettyFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        rid = getattr(record, "run_id", None)
        rid_part = f" [run={rid}]" if rid else ""
        event = getattr(record, "event_type", None)
        event_part = f" ({event})" if event else ""
        ts = _format_timestamp(record)
        return f"{ts} {record.levelname} [ascent]{rid_part} {record.getMessage()}{event_part}"


def configure_logging(env: str = "development", level: str = "INFO") -> None:
    """Configure structured logging based on environment."""
    logger = logging.getLogger("ascent")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter: logging.Formatter
    if env.lower() == "production":
        formatter = JsonFormatter()
    else:
        formatter = PrettyFormatter()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(RunIdFilter())

    logger.handlers = [handler]
    logger.propagate = True


def _safe_truncate(value, limit: int = 500):
    try:
        text = str(value)
    except Exception:
        return "<unserializable>"
    if len(text) <= limit:
        return text
    return text[:limit] + "...<truncated>"


def log_event(
    level: str,
    msg: str,
    *,
    event_type: str,
    habit_id: Optional[str] = None,
    error_code: Optional[str] = None,
    extra: Optional[Dict[str, object]] = None,
):
    """Structured logging helper with safe truncation and run correlation."""

    logger = logging.getLogger("ascent")
    if not logger.handlers:
        # Ensure logging configured in edge cases (tests)
        configure_logging(os.getenv("ENV", "development"))

    payload: Dict[str, object] = {
        "run_id": get_run_id(),
        "event_type": event_type,
    }
    if habit_id:
        payload["habit_id"] = habit_id
    if error_code:
        payload["error_code"] = error_code
    if extra:
        for k, v in extra.items():
            payload[k] = _safe_truncate(v)

    log_fn = getattr(logger, level, logger.info)
    log_fn(msg, extra=payload)
