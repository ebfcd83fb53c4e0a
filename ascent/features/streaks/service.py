from __future__ import annotations

from datetime import date, timedelta, tzinfo
from typing import Optional, Sequence

from ascent.features.history import DayIndex, is_completed, latest_by_day
from ascent.models.habit import CompletionRecord, Habit
from ascent.models.pool import MorningInputs


class StreakService:
    """Day-level streak counting over completion history.

    A day that has not been completed *yet* (today) never breaks a streak; the
    streak is counted back from yesterday in that case.
    """

    def __init__(self, tz: Optional[tzinfo] = None, lookback_days: int = 365):
        self._tz = tz
        self._lookback_days = lookback_days

    def habit_streak(self, habit_id: str, completions: Sequence[CompletionRecord], today: date) -> int:
        index = latest_by_day(completions, self._tz)
        return self._count_back(today, lambda day: is_completed(habit_id, day, index))

    def overall_streak(self, habits: Sequence[Habit], completions: Sequence[CompletionRecord], today: date) -> int:
        if not habits:
            return 0
        index = latest_by_day(completions, self._tz)
        return self._count_back(today, lambda day: self._all_done(habits, day, index))

    def day_complete(self, habits: Sequence[Habit], completions: Sequence[CompletionRecord], day: date) -> bool:
        if not habits:
            return False
        index = latest_by_day(completions, self._tz)
        return self._all_done(habits, day, index)

    def morning_inputs(
        self,
        habits: Sequence[Habit],
        completions: Sequence[CompletionRecord],
        today: date,
        last_sleep_hours: Optional[float] = None,
    ) -> MorningInputs:
        """Inputs for the morning pool baseline, derived from history."""
        yesterday = today - timedelta(days=1)
        return MorningInputs(
            prior_day_complete=self.day_complete(habits, completions, yesterday),
            current_streak_days=self.overall_streak(habits, completions, today),
            last_sleep_hours=last_sleep_hours,
        )

    # Internal helpers -------------------------------------------------
    def _count_back(self, today: date, done_on) -> int:
        streak = 0
        for offset in range(self._lookback_days):
            day = today - timedelta(days=offset)
            done = done_on(day)
            if offset == 0 and not done:
                continue
            if not done:
                break
            streak += 1
        return streak

    @staticmethod
    def _all_done(habits: Sequence[Habit], day: date, index: DayIndex) -> bool:
        return all(is_completed(habit.id, day, index) for habit in habits)
