"""
Completion-history helpers shared by the ratchet and titration engines.

Raw history can contain duplicates for the same habit and day (the user
toggled a habit twice) and rows written by older app versions. Everything here
collapses that into one authoritative value per (habit, calendar day) with the
later write winning, and quietly skips rows whose day cannot be read.
"""

from __future__ import annotations

from datetime import date, tzinfo
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from pydantic import ValidationError as PydanticValidationError

from ascent.core.dates import to_day
from ascent.core.logging import log_event
from ascent.models.habit import CompletionRecord

DayIndex = Dict[Tuple[str, date], bool]


def latest_by_day(completions: Iterable[CompletionRecord], tz: Optional[tzinfo] = None) -> DayIndex:
    index: DayIndex = {}
    for record in completions:
        day = to_day(record.date, tz)
        if day is None:
            continue
        # Later writes overwrite earlier ones for the same key.
        index[(record.habit_id, day)] = record.completed
    return index


def completed_days(habit_id: str, index: DayIndex) -> List[date]:
    return sorted(day for (hid, day), done in index.items() if hid == habit_id and done)


def record_count(habit_id: str, index: DayIndex) -> int:
    """Number of distinct days with any record for the habit."""
    return sum(1 for (hid, _day) in index if hid == habit_id)


def is_completed(habit_id: str, day: date, index: DayIndex) -> bool:
    return index.get((habit_id, day), False)


def coerce_completions(rows: Sequence[Any]) -> Tuple[CompletionRecord, ...]:
    """Validate raw rows into CompletionRecords, dropping the malformed ones."""
    records: List[CompletionRecord] = []
    dropped = 0
    for row in rows:
        if isinstance(row, CompletionRecord):
            records.append(row)
            continue
        if not isinstance(row, Mapping):
            dropped += 1
            continue
        try:
            records.append(CompletionRecord.model_validate(_legacy_keys(row)))
        except PydanticValidationError:
            dropped += 1
    if dropped:
        log_event(
            "warning",
            "history.completions_dropped",
            event_type="history.malformed",
            extra={"dropped": dropped, "kept": len(records)},
        )
    return tuple(records)


def _legacy_keys(row: Mapping[str, Any]) -> Mapping[str, Any]:
    # Early app builds wrote the habit reference as "odHabitId".
    if "habitId" not in row and "habit_id" not in row and "odHabitId" in row:
        patched = dict(row)
        patched["habitId"] = patched.pop("odHabitId")
        return patched
    return row
