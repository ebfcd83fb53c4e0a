"""
Ratchet Engine - Computation Service

Runs the configured adjustment strategy over every habit, one
recommendation at a time, and commits accepted adjustments.
All checks are deterministic for a fixed `today`.
"""

from __future__ import annotations

from datetime import date, tzinfo
from typing import List, Optional, Sequence, Tuple

from ascent.core.errors import NotFoundError
from ascent.core.logging import log_event
from ascent.features.history import latest_by_day
from ascent.features.ratchet.consistency import consistency_from_index
from ascent.features.ratchet.insights import generate_insight
from ascent.features.ratchet.strategies import RatchetStrategy, strategy_for_mode
from ascent.models.habit import CompletionRecord, Habit
from ascent.models.ratchet import RatchetBook, RatchetInsight, RatchetRecommendation


class RatchetEngine:
    """
    Applies one RatchetStrategy to a user's habits.

    The engine never lowers anything by itself: `warnings()` only reports
    downward signals and `apply()` refuses a downgrade unless the caller
    passes allow_downgrade=True.
    """

    def __init__(self, strategy: RatchetStrategy, tz: Optional[tzinfo] = None):
        self.strategy = strategy
        self.tz = tz

    @classmethod
    def from_settings(cls, settings, tz: Optional[tzinfo] = None) -> "RatchetEngine":
        return cls(strategy_for_mode(settings.RATCHET_MODE, settings), tz=tz)

    @property
    def mode(self) -> str:
        return self.strategy.mode

    def check_all(
        self,
        habits: Sequence[Habit],
        completions: Sequence[CompletionRecord],
        book: RatchetBook,
        today: date,
    ) -> List[RatchetRecommendation]:
        if book.mode != self.mode:
            log_event(
                "warning",
                "ratchet.mode_mismatch",
                event_type="ratchet.mode_mismatch",
                extra={"book_mode": book.mode, "engine_mode": self.mode},
            )
        raises = []
        for habit in habits:
            recommendation = self.strategy.check_up(habit, completions, book, today, self.tz)
            if recommendation is not None:
                raises.append(recommendation)
        return raises

    def next_recommendation(
        self,
        habits: Sequence[Habit],
        completions: Sequence[CompletionRecord],
        book: RatchetBook,
        today: date,
    ) -> Optional[RatchetRecommendation]:
        """The first pending raise in habit order; raises are surfaced one at a time."""
        raises = self.check_all(habits, completions, book, today)
        if not raises:
            return None
        chosen = raises[0]
        log_event(
            "info",
            "ratchet.recommended",
            event_type="ratchet.recommendation",
            habit_id=chosen.habit_id,
            extra={"mode": chosen.mode, "before": chosen.before, "after": chosen.after, "pending": len(raises)},
        )
        return chosen

    def warnings(
        self,
        habits: Sequence[Habit],
        completions: Sequence[CompletionRecord],
        book: RatchetBook,
        today: date,
    ) -> List[RatchetRecommendation]:
        found = []
        for habit in habits:
            signal = self.strategy.check_down(habit, completions, book, today, self.tz)
            if signal is not None:
                found.append(signal)
        return found

    def apply(
        self,
        book: RatchetBook,
        habits: Sequence[Habit],
        recommendation: RatchetRecommendation,
        today: date,
        allow_downgrade: bool = False,
    ) -> Tuple[RatchetBook, Tuple[Habit, ...]]:
        habit = next((h for h in habits if h.id == recommendation.habit_id), None)
        if habit is None:
            raise NotFoundError(f"Habit {recommendation.habit_id} not found")

        new_book, new_habit = self.strategy.apply(book, habit, recommendation, today, allow_downgrade)
        if new_book.mode != self.mode:
            new_book = new_book.model_copy(update={"mode": self.mode})
        new_habits = tuple(new_habit if h.id == habit.id else h for h in habits)

        log_event(
            "info",
            "ratchet.applied",
            event_type="ratchet.applied",
            habit_id=habit.id,
            extra={
                "mode": self.mode,
                "direction": recommendation.direction,
                "before": recommendation.before,
                "after": recommendation.after,
            },
        )
        return new_book, new_habits

    def insight_for(
        self,
        habit: Habit,
        completions: Sequence[CompletionRecord],
        book: RatchetBook,
        today: date,
        recent_raise: Optional[RatchetRecommendation] = None,
    ) -> Optional[RatchetInsight]:
        index = latest_by_day(completions, self.tz)
        pct = consistency_from_index(habit.id, index, book.consistency_window, today)
        floor_state = book.floors.get(habit.id)
        floor = floor_state.floor if floor_state else 0
        return generate_insight(habit.name, pct, floor, recent_raise)
