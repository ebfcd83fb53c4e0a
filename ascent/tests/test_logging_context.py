"""Tests for structured logging and run_id propagation."""

import json
import logging

from ascent.core.errors import AppError, NotFoundError
from ascent.core.logging import JsonFormatter, _safe_truncate, bind_run_id, get_run_id, log_event


def test_bind_run_id_sets_and_resets():
    assert get_run_id() is None
    with bind_run_id("run-123") as rid:
        assert rid == "run-123"
        assert get_run_id() == "run-123"
    assert get_run_id() is None


def test_generated_run_id():
    with bind_run_id() as rid:
        assert len(rid) == 12


def test_log_event_carries_run_id(caplog):
    with caplog.at_level(logging.INFO, logger="ascent"):
        with bind_run_id("run-abc"):
            log_event("info", "pool.drain_logged", event_type="pool.drain", habit_id="read", extra={"minutes": 20})
    records = [r for r in caplog.records if getattr(r, "run_id", None) == "run-abc"]
    assert records
    assert records[0].event_type == "pool.drain"
    assert records[0].habit_id == "read"
    assert records[0].minutes == "20"


def test_errors_capture_run_id():
    with bind_run_id("run-err"):
        err = NotFoundError("Habit ghost not found")
    assert err.to_dict() == {"error": {"code": "not_found", "message": "Habit ghost not found", "run_id": "run-err"}}
    assert isinstance(err, LookupError)
    assert AppError("x", code="custom").code == "custom"


def test_json_formatter_includes_structured_fields():
    record = logging.LogRecord("ascent", logging.INFO, __file__, 1, "hello", None, None)
    record.run_id = "run-1"
    record.event_type = "storage.save"
    payload = json.loads(JsonFormatter().format(record))
    assert payload["message"] == "hello"
    assert payload["run_id"] == "run-1"
    assert payload["event_type"] == "storage.save"
    assert "habit_id" not in payload


def test_safe_truncate():
    assert _safe_truncate("x" * 600).endswith("...<truncated>")
    assert _safe_truncate(42) == "42"
