"""Builders for completion and screen-time history used across the suite."""

from datetime import date, timedelta
from typing import Iterable, List

from ascent.models.habit import CompletionRecord, Habit
from ascent.models.screen_time import ScreenTimeEntry


def habit(habit_id: str = "read", name: str = "Read", unit: str = "pages", target: int = 5, resistance: int = 5) -> Habit:
    return Habit(id=habit_id, name=name, unit=unit, target_amount=target, resistance=resistance)


def daily_completions(habit_id: str, today: date, days: int, missed: Iterable[int] = ()) -> List[CompletionRecord]:
    """One record per day for `days` days ending today; offsets in `missed` are recorded as not done."""
    skipped = set(missed)
    return [
        CompletionRecord(habit_id=habit_id, date=(today - timedelta(days=offset)).isoformat(), completed=offset not in skipped)
        for offset in range(days)
    ]


def screen_entry(day: date, drain: float, recharge: float = 0) -> ScreenTimeEntry:
    return ScreenTimeEntry(date=day.isoformat(), total_minutes=drain + recharge, drain_minutes=drain, recharge_minutes=recharge)


def days_from(start: date, end: date) -> List[date]:
    """Inclusive calendar range."""
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]
