"""
Shared ratchet primitives: rolling-window consistency and cooldown.

Both adjustment strategies use these and nothing else to read history, so
they always agree on what "consistent" and "recently adjusted" mean.
"""

from datetime import date, tzinfo
from typing import Iterable, Optional

from ascent.core.dates import days_between, to_day, trailing_days
from ascent.core.numbers import round_half_up
from ascent.features.history import DayIndex, is_completed, latest_by_day
from ascent.models.habit import CompletionRecord


def consistency_from_index(habit_id: str, index: DayIndex, window_days: int, today: date) -> int:
    if window_days <= 0:
        return 0
    done = sum(1 for day in trailing_days(today, window_days) if is_completed(habit_id, day, index))
    return round_half_up(done / window_days * 100)


def consistency(
    habit_id: str,
    completions: Iterable[CompletionRecord],
    window_days: int,
    today: date,
    tz: Optional[tzinfo] = None,
) -> int:
    """
    Percentage (0..100) of the trailing `window_days` calendar days, today
    included, with a completed record for the habit.
    """
    return consistency_from_index(habit_id, latest_by_day(completions, tz), window_days, today)


def cooldown_active(last_adjusted: Optional[str], today: date, cooldown_days: int) -> bool:
    """True while fewer than `cooldown_days` whole days have passed since the last adjustment."""
    last_day = to_day(last_adjusted)
    if last_day is None:
        return False
    return days_between(last_day, today) < cooldown_days
