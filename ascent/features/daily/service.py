"""
Daily service: the read-modify-write caller of the engines.

Every public method loads the whole UserRecord, runs pure engine functions,
saves the whole record back and returns the new value. Nothing here holds
state between calls apart from the injected store and settings, so the
engines stay free of I/O and wall-clock reads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Mapping, Optional, Tuple

from ascent.core.config import Settings, settings as default_settings, validate_config
from ascent.core.dates import local_hour, reference_zone, today as today_in, utc_now
from ascent.core.errors import ConfigError, NotFoundError, ValidationError
from ascent.core.logging import bind_run_id, log_event
from ascent.features.history import latest_by_day
from ascent.features.pool.engine import (
    log_drain_activity,
    log_recharge_activity,
    order_by_pool_level,
    pool_status,
    recovery_suggestions,
)
from ascent.features.pool.service import (
    add_drain,
    add_recharge,
    daily_summary,
    initialize_daily_pool,
    recompute,
    roll_over_day,
)
from ascent.features.ratchet.consistency import consistency_from_index
from ascent.features.ratchet.service import RatchetEngine
from ascent.features.ratchet.strategies import should_suggest_easy_mode
from ascent.features.storage.store import RecordStore
from ascent.features.streaks.service import StreakService
from ascent.features.titration.engine import cross_titration, record_screen_time, titration_score
from ascent.features.titration.sources import ScreenTimeSource
from ascent.features.titration.tables import TitrationConfig
from ascent.models.habit import CompletionRecord, Habit
from ascent.models.pool import DailySummary, PoolState, PoolStatus, RecoverySuggestion
from ascent.models.ratchet import RatchetInsight, RatchetRecommendation
from ascent.models.screen_time import ScreenTimeEntry, TitrationReport
from ascent.models.user_record import UserRecord


@dataclass(frozen=True)
class RatchetReview:
    recommendation: Optional[RatchetRecommendation] = None
    warnings: Tuple[RatchetRecommendation, ...] = ()

    def to_dict(self) -> dict:
        return {
            "recommendation": self.recommendation.to_dict() if self.recommendation else None,
            "warnings": [w.to_dict() for w in self.warnings],
        }


@dataclass(frozen=True)
class TitrationSummary:
    report: TitrationReport
    score: Optional[int] = None

    def to_dict(self) -> dict:
        return {"report": self.report.to_dict(), "score": self.score}


@dataclass(frozen=True)
class DailyStatus:
    date: str
    morning_level: int
    current_level: int
    pool: PoolStatus
    streak: int
    habit_order: Tuple[str, ...] = ()
    easy_mode: Tuple[str, ...] = ()
    insights: Tuple[RatchetInsight, ...] = field(default_factory=tuple)
    recovery: Tuple[RecoverySuggestion, ...] = ()

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "morningLevel": self.morning_level,
            "currentLevel": self.current_level,
            "pool": self.pool.to_dict(),
            "streak": self.streak,
            "habitOrder": list(self.habit_order),
            "easyMode": list(self.easy_mode),
            "insights": [i.to_dict() for i in self.insights],
            "recovery": [s.to_dict() for s in self.recovery],
        }


class DailyService:
    """Orchestrates one user's day over a RecordStore."""

    def __init__(self, store: RecordStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or default_settings
        validate_config(settings_obj=self.settings)
        self.tz = reference_zone(self.settings.REFERENCE_TIMEZONE)
        if self.tz is None:
            raise ConfigError(f"Unknown REFERENCE_TIMEZONE: {self.settings.REFERENCE_TIMEZONE!r}")
        self.streaks = StreakService(tz=self.tz)
        self.ratchet = RatchetEngine.from_settings(self.settings, tz=self.tz)
        self.titration_config = TitrationConfig.from_settings(self.settings)

    # Helpers ------------------------------------------------------------
    def _today(self, now: Optional[datetime] = None) -> date:
        return today_in(self.tz, now)

    def _roll_over(self, record: UserRecord, day: date, now: Optional[datetime]) -> UserRecord:
        inputs = self.streaks.morning_inputs(record.habits, record.completions, day, record.last_sleep_hours)
        state, history = roll_over_day(
            record.pool_state,
            record.pool_history,
            inputs,
            day,
            now,
            retention_days=self.settings.HISTORY_RETENTION_DAYS,
        )
        return record.model_copy(update={"pool_state": state, "pool_history": history})

    def _ensure_day(self, record: UserRecord, now: Optional[datetime]) -> UserRecord:
        day = self._today(now)
        if record.pool_state is not None and record.pool_state.date == day.isoformat():
            return record
        return self._roll_over(record, day, now)

    def _current_state(self, record: UserRecord, day: date, moment: datetime) -> PoolState:
        state = record.pool_state
        if state is None or state.date != day.isoformat():
            inputs = self.streaks.morning_inputs(record.habits, record.completions, day, record.last_sleep_hours)
            return initialize_daily_pool(inputs, day, moment)
        return recompute(state, moment, record.custom_app_mappings)

    # Habits -------------------------------------------------------------
    def add_habit(self, habit: Habit) -> Tuple[Habit, ...]:
        with bind_run_id():
            record = self.store.load()
            if any(h.id == habit.id for h in record.habits):
                raise ValidationError(f"Habit {habit.id} already exists")
            habits = record.habits + (habit,)
            self.store.save(record.model_copy(update={"habits": habits}))
            log_event("info", "habit.added", event_type="habit.added", habit_id=habit.id)
            return habits

    def record_completion(self, habit_id: str, completed: bool = True, now: Optional[datetime] = None) -> CompletionRecord:
        with bind_run_id():
            record = self.store.load()
            if not any(h.id == habit_id for h in record.habits):
                raise NotFoundError(f"Habit {habit_id} not found")
            entry = CompletionRecord(habit_id=habit_id, date=self._today(now).isoformat(), completed=completed)
            self.store.save(record.model_copy(update={"completions": record.completions + (entry,)}))
            log_event(
                "info",
                "habit.completion_recorded",
                event_type="habit.completion",
                habit_id=habit_id,
                extra={"date": entry.date, "completed": completed},
            )
            return entry

    # Pool ---------------------------------------------------------------
    def start_day(self, today: Optional[date] = None, last_sleep_hours: Optional[float] = None,
                  now: Optional[datetime] = None) -> PoolState:
        with bind_run_id():
            record = self.store.load()
            if last_sleep_hours is not None:
                record = record.model_copy(update={"last_sleep_hours": last_sleep_hours})
            record = self._roll_over(record, today or self._today(now), now)
            self.store.save(record)
            return record.pool_state

    def log_drain(self, app: str, minutes: float, now: Optional[datetime] = None) -> PoolState:
        with bind_run_id():
            moment = now or utc_now()
            record = self._ensure_day(self.store.load(), moment)
            entry = log_drain_activity(app, minutes, record.custom_app_mappings, moment)
            state = add_drain(record.pool_state, entry, moment, record.custom_app_mappings)
            self.store.save(record.model_copy(update={"pool_state": state}))
            log_event(
                "info",
                "pool.drain_logged",
                event_type="pool.drain",
                extra={"app": app, "minutes": minutes, "impact": entry.impact, "level": state.current_level},
            )
            return state

    def log_recharge(self, activity_type: str, intensity: str, now: Optional[datetime] = None) -> PoolState:
        with bind_run_id():
            moment = now or utc_now()
            record = self._ensure_day(self.store.load(), moment)
            entry = log_recharge_activity(activity_type, intensity, moment)
            if entry.error:
                log_event(
                    "warning",
                    "pool.unknown_recharge",
                    event_type="pool.recharge",
                    error_code=entry.error,
                    extra={"activity_type": activity_type, "intensity": intensity},
                )
            state = add_recharge(record.pool_state, entry, moment, record.custom_app_mappings)
            self.store.save(record.model_copy(update={"pool_state": state}))
            return state

    def set_app_category(self, app: str, category: str) -> Mapping[str, str]:
        with bind_run_id():
            record = self.store.load()
            mappings = dict(record.custom_app_mappings)
            mappings[app] = category
            self.store.save(record.model_copy(update={"custom_app_mappings": mappings}))
            return mappings

    # Ratchet ------------------------------------------------------------
    def review_ratchets(self, today: Optional[date] = None) -> RatchetReview:
        with bind_run_id():
            day = today or self._today()
            record = self.store.load()
            return RatchetReview(
                recommendation=self.ratchet.next_recommendation(record.habits, record.completions, record.ratchet, day),
                warnings=tuple(self.ratchet.warnings(record.habits, record.completions, record.ratchet, day)),
            )

    def apply_ratchet(
        self,
        recommendation: RatchetRecommendation,
        today: Optional[date] = None,
        allow_downgrade: bool = False,
    ) -> Optional[RatchetInsight]:
        """Commit an accepted recommendation; returns the insight to show for it."""
        with bind_run_id():
            day = today or self._today()
            record = self.store.load()
            book, habits = self.ratchet.apply(record.ratchet, record.habits, recommendation, day, allow_downgrade)
            record = record.model_copy(update={"ratchet": book, "habits": habits})
            self.store.save(record)
            habit = next(h for h in habits if h.id == recommendation.habit_id)
            return self.ratchet.insight_for(habit, record.completions, book, day, recent_raise=recommendation)

    # Titration ----------------------------------------------------------
    def record_screen_time(self, minutes_by_app: Mapping[str, float], day: Optional[date] = None,
                           total_minutes: Optional[float] = None,
                           today: Optional[date] = None) -> Tuple[ScreenTimeEntry, ...]:
        with bind_run_id():
            today = today or self._today()
            record = self.store.load()
            history = record_screen_time(
                minutes_by_app,
                day or today,
                record.screen_time_history,
                total_minutes=total_minutes,
                today=today,
                config=self.titration_config,
            )
            evicted = {e.date for e in record.screen_time_history} - {e.date for e in history}
            self.store.save(record.model_copy(update={"screen_time_history": history}))
            log_event(
                "info",
                "titration.screen_time_recorded",
                event_type="titration.record",
                extra={"day": (day or today).isoformat(), "entries": len(history), "evicted": len(evicted)},
            )
            return history

    def sync_screen_time(self, source: ScreenTimeSource, day: Optional[date] = None,
                         today: Optional[date] = None) -> Optional[Tuple[ScreenTimeEntry, ...]]:
        """Pull a day's usage from a ScreenTimeSource; None when the source has nothing."""
        target = day or today or self._today()
        usage = source.usage_for(target)
        if usage is None:
            return None
        return self.record_screen_time(usage, target, today=today)

    def titration(self, today: Optional[date] = None) -> TitrationSummary:
        with bind_run_id():
            day = today or self._today()
            record = self.store.load()
            history, completions = record.screen_time_history, record.completions
            return TitrationSummary(
                report=cross_titration(history, completions, day, self.titration_config, tz=self.tz),
                score=titration_score(history, completions, day, self.titration_config, tz=self.tz),
            )

    # Overview -----------------------------------------------------------
    def status(self, now: Optional[datetime] = None) -> DailyStatus:
        """Read-only view of today. Never writes; an unstarted day is previewed."""
        with bind_run_id():
            moment = now or utc_now()
            day = self._today(moment)
            record = self.store.load()

            state = self._current_state(record, day, moment)

            level = state.current_level
            index = latest_by_day(record.completions, self.tz)
            window = record.ratchet.consistency_window
            easy_mode: List[str] = []
            insights: List[RatchetInsight] = []
            for habit in record.habits:
                floor_state = record.ratchet.floors.get(habit.id)
                floor = floor_state.floor if floor_state else 0
                pct = consistency_from_index(habit.id, index, window, day)
                if should_suggest_easy_mode(pct, floor, level):
                    easy_mode.append(habit.id)
                insight = self.ratchet.insight_for(habit, record.completions, record.ratchet, day)
                if insight is not None:
                    insights.append(insight)

            return DailyStatus(
                date=state.date,
                morning_level=state.morning_level,
                current_level=level,
                pool=pool_status(level),
                streak=self.streaks.overall_streak(record.habits, record.completions, day),
                habit_order=tuple(h.id for h in order_by_pool_level(record.habits, level)),
                easy_mode=tuple(easy_mode),
                insights=tuple(insights),
                recovery=tuple(recovery_suggestions(level, local_hour(self.tz, moment), state.recharge_activities)),
            )

    def daily_summary(self, now: Optional[datetime] = None) -> DailySummary:
        """Read-only summary of today's pool against the stored pool history."""
        with bind_run_id():
            moment = now or utc_now()
            record = self.store.load()
            state = self._current_state(record, self._today(moment), moment)
            return daily_summary(record.pool_history, state)
