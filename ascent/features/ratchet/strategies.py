"""
Ratchet adjustment strategies.

Two variants of one capability, selected per deployment by RATCHET_MODE:

- TargetEscalationStrategy raises a habit's numeric target (5 -> 7 pages)
  once trailing-14-day consistency reaches 85%, and can *suggest* a lower
  target when consistency falls under 50%.
- FloorRaiseStrategy raises a consistency floor (the level the habit is
  expected to hold) when consistency clears floor + 15, capped at 85%.

The two strategies keep separate thresholds.
Both use the same consistency and cooldown primitives, and neither ever
lowers a value on its own; downgrades are advisory until a caller opts in.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, tzinfo
from typing import Optional, Sequence, Tuple

from ascent.core.errors import ConfigError, ValidationError
from ascent.features.history import latest_by_day, record_count
from ascent.features.ratchet.consistency import consistency_from_index, cooldown_active
from ascent.features.ratchet.templates import (
    FLOOR_STATUS_BANDS,
    FLOOR_STATUS_BUILDING,
    FLOOR_STATUS_FALLBACK,
    RECOMMENDATION_TEMPLATES,
)
from ascent.models.habit import CompletionRecord, Habit
from ascent.models.ratchet import (
    FloorRatchetState,
    FloorRecord,
    FloorStatus,
    RatchetBook,
    RatchetEvent,
    RatchetMode,
    RatchetRecommendation,
    TargetRatchetState,
)


@dataclass(frozen=True)
class TargetRatchetConfig:
    min_records: int = 14
    up_threshold: int = 85
    down_min_records: int = 7
    down_threshold: int = 50
    window_days: int = 14
    cooldown_days: int = 7
    # (largest current target the tier applies to, increment)
    increment_tiers: Tuple[Tuple[float, int], ...] = ((3, 1), (7, 2), (15, 3), (30, 5), (math.inf, 5))
    # (current target must exceed, step down)
    step_down_tiers: Tuple[Tuple[int, int], ...] = ((30, 5), (15, 3), (5, 2), (1, 1))
    min_target: int = 1

    @classmethod
    def from_settings(cls, settings) -> "TargetRatchetConfig":
        return cls(
            min_records=settings.TARGET_MIN_RECORDS,
            up_threshold=settings.TARGET_UP_THRESHOLD,
            down_min_records=settings.TARGET_DOWN_MIN_RECORDS,
            down_threshold=settings.TARGET_DOWN_THRESHOLD,
            window_days=settings.CONSISTENCY_WINDOW_DAYS,
            cooldown_days=settings.RATCHET_COOLDOWN_DAYS,
        )


@dataclass(frozen=True)
class FloorRatchetConfig:
    margin: int = 15
    max_floor: int = 85  # always below 100
    raise_factor: float = 0.9
    cooldown_days: int = 7
    history_limit: int = 10
    slip_warning: int = 10

    @classmethod
    def from_settings(cls, settings) -> "FloorRatchetConfig":
        return cls(
            margin=settings.FLOOR_MARGIN,
            max_floor=settings.FLOOR_MAX,
            raise_factor=settings.FLOOR_RAISE_FACTOR,
            cooldown_days=settings.RATCHET_COOLDOWN_DAYS,
            history_limit=settings.FLOOR_HISTORY_LIMIT,
            slip_warning=settings.FLOOR_SLIP_WARNING,
        )


@dataclass(frozen=True)
class FloorDecision:
    should_raise: bool
    new_floor: int
    current_floor: int
    consistency: int


def _render(template_key: str, **fields) -> Tuple[str, str]:
    template = RECOMMENDATION_TEMPLATES[template_key]
    return template["message"].format(**fields), template["recommendation"].format(**fields).strip()


class RatchetStrategy(ABC):
    """One way of turning consistency into a difficulty adjustment."""

    mode: RatchetMode

    @abstractmethod
    def check_up(
        self,
        habit: Habit,
        completions: Sequence[CompletionRecord],
        book: RatchetBook,
        today: date,
        tz: Optional[tzinfo] = None,
    ) -> Optional[RatchetRecommendation]:
        """Upward adjustment proposal, or None."""

    @abstractmethod
    def check_down(
        self,
        habit: Habit,
        completions: Sequence[CompletionRecord],
        book: RatchetBook,
        today: date,
        tz: Optional[tzinfo] = None,
    ) -> Optional[RatchetRecommendation]:
        """Advisory downward signal, or None. Never applied automatically."""

    @abstractmethod
    def apply(
        self,
        book: RatchetBook,
        habit: Habit,
        recommendation: RatchetRecommendation,
        today: date,
        allow_downgrade: bool = False,
    ) -> Tuple[RatchetBook, Habit]:
        """Commit a recommendation, returning the new book and habit."""

    def _check_owner(self, habit: Habit, recommendation: RatchetRecommendation) -> None:
        if recommendation.habit_id != habit.id:
            raise ValidationError(
                f"Recommendation for {recommendation.habit_id} cannot be applied to {habit.id}",
            )
        if recommendation.mode != self.mode:
            raise ValidationError(
                f"{recommendation.mode} recommendation cannot be applied in {self.mode} mode",
            )


class TargetEscalationStrategy(RatchetStrategy):
    mode: RatchetMode = "target"

    def __init__(self, config: Optional[TargetRatchetConfig] = None):
        self.config = config or TargetRatchetConfig()

    def initial_state(self, habit: Habit) -> TargetRatchetState:
        return TargetRatchetState(habit_id=habit.id, current_target=habit.target_amount)

    def state_for(self, habit: Habit, book: RatchetBook) -> TargetRatchetState:
        return book.targets.get(habit.id) or self.initial_state(habit)

    def increment_for(self, current_target: int) -> int:
        for max_target, increment in self.config.increment_tiers:
            if current_target <= max_target:
                return increment
        return self.config.increment_tiers[-1][1]

    def step_down_for(self, current_target: int) -> int:
        """Target after one downgrade step, never below the minimum target."""
        for above, step in self.config.step_down_tiers:
            if current_target > above:
                return max(self.config.min_target, current_target - step)
        return current_target

    def check_up(self, habit, completions, book, today, tz=None):
        cfg = self.config
        index = latest_by_day(completions, tz)
        if record_count(habit.id, index) < cfg.min_records:
            return None

        state = self.state_for(habit, book)
        if cooldown_active(state.last_ratchet_date, today, cfg.cooldown_days):
            return None

        pct = consistency_from_index(habit.id, index, cfg.window_days, today)
        if pct < cfg.up_threshold:
            return None

        before = state.current_target
        increment = self.increment_for(before)
        after = before + increment
        message, recommendation = _render(
            "target_up", name=habit.name, unit=habit.unit, consistency=pct, before=before, after=after,
        )
        return RatchetRecommendation(
            habit_id=habit.id,
            habit_name=habit.name,
            mode=self.mode,
            direction="up",
            before=before,
            after=after,
            increment=increment,
            consistency=pct,
            message=message,
            recommendation=recommendation,
        )

    def check_down(self, habit, completions, book, today, tz=None):
        cfg = self.config
        index = latest_by_day(completions, tz)
        if record_count(habit.id, index) < cfg.down_min_records:
            return None

        pct = consistency_from_index(habit.id, index, cfg.window_days, today)
        if pct >= cfg.down_threshold:
            return None

        before = self.state_for(habit, book).current_target
        after = self.step_down_for(before)
        if after >= before:
            return None

        message, recommendation = _render(
            "target_down", name=habit.name, unit=habit.unit, consistency=pct, before=before, after=after,
        )
        return RatchetRecommendation(
            habit_id=habit.id,
            habit_name=habit.name,
            mode=self.mode,
            direction="down",
            before=before,
            after=after,
            increment=after - before,
            consistency=pct,
            message=message,
            recommendation=recommendation,
        )

    def apply(self, book, habit, recommendation, today, allow_downgrade=False):
        self._check_owner(habit, recommendation)
        state = self.state_for(habit, book)
        before = state.current_target
        after = recommendation.after

        if recommendation.direction == "up":
            if after <= before:
                raise ValidationError(f"Target for {habit.id} can only rise (was {before}, got {after})")
        else:
            if not allow_downgrade:
                raise ValidationError(f"Downgrading {habit.id} requires explicit confirmation")
            if not self.config.min_target <= after < before:
                raise ValidationError(f"Invalid downgrade for {habit.id}: {before} -> {after}")

        if cooldown_active(state.last_ratchet_date, today, self.config.cooldown_days):
            raise ValidationError(f"{habit.id} was adjusted less than {self.config.cooldown_days} days ago")

        stamp = today.isoformat()
        event = RatchetEvent(date=stamp, previous_target=before, new_target=after, direction=recommendation.direction)
        new_state = state.model_copy(update={
            "current_target": after,
            "last_ratchet_date": stamp,
            "events": state.events + (event,),
        })
        targets = dict(book.targets)
        targets[habit.id] = new_state
        new_book = book.model_copy(update={"targets": targets})
        new_habit = habit.model_copy(update={"target_amount": after})
        return new_book, new_habit


class FloorRaiseStrategy(RatchetStrategy):
    mode: RatchetMode = "floor"

    def __init__(self, config: Optional[FloorRatchetConfig] = None):
        self.config = config or FloorRatchetConfig()

    def initial_state(self, habit: Habit) -> FloorRatchetState:
        return FloorRatchetState(habit_id=habit.id)

    def state_for(self, habit_id: str, book: RatchetBook) -> FloorRatchetState:
        return book.floors.get(habit_id) or FloorRatchetState(habit_id=habit_id)

    def should_raise_floor(
        self,
        habit_id: str,
        completions: Sequence[CompletionRecord],
        book: RatchetBook,
        today: date,
        tz: Optional[tzinfo] = None,
    ) -> FloorDecision:
        cfg = self.config
        state = self.state_for(habit_id, book)
        current = state.floor
        index = latest_by_day(completions, tz)
        pct = consistency_from_index(habit_id, index, book.consistency_window, today)

        if cooldown_active(state.last_raised, today, cfg.cooldown_days):
            return FloorDecision(False, current, current, pct)

        if pct >= current + cfg.margin and pct > current:
            new_floor = min(math.floor(pct * cfg.raise_factor), cfg.max_floor)
            if new_floor > current:
                return FloorDecision(True, new_floor, current, pct)

        return FloorDecision(False, current, current, pct)

    def check_up(self, habit, completions, book, today, tz=None):
        decision = self.should_raise_floor(habit.id, completions, book, today, tz)
        if not decision.should_raise:
            return None
        message, recommendation = _render(
            "floor_up",
            name=habit.name,
            unit=habit.unit,
            consistency=decision.consistency,
            before=decision.current_floor,
            after=decision.new_floor,
        )
        return RatchetRecommendation(
            habit_id=habit.id,
            habit_name=habit.name,
            mode=self.mode,
            direction="up",
            before=decision.current_floor,
            after=decision.new_floor,
            increment=decision.new_floor - decision.current_floor,
            consistency=decision.consistency,
            message=message,
            recommendation=recommendation,
        )

    def check_down(self, habit, completions, book, today, tz=None):
        floor = self.state_for(habit.id, book).floor
        if floor == 0:
            return None
        index = latest_by_day(completions, tz)
        pct = consistency_from_index(habit.id, index, book.consistency_window, today)
        if pct - floor >= -self.config.slip_warning:
            return None
        message, recommendation = _render(
            "floor_down", name=habit.name, unit=habit.unit, consistency=pct, before=floor, after=floor,
        )
        return RatchetRecommendation(
            habit_id=habit.id,
            habit_name=habit.name,
            mode=self.mode,
            direction="down",
            before=floor,
            after=floor,
            consistency=pct,
            message=message,
            recommendation=recommendation,
        )

    def apply(self, book, habit, recommendation, today, allow_downgrade=False):
        self._check_owner(habit, recommendation)
        if recommendation.direction != "up":
            raise ValidationError("Floors never move down; slipping warnings are advisory only")

        cfg = self.config
        state = self.state_for(habit.id, book)
        new_floor = recommendation.after
        if not state.floor < new_floor <= cfg.max_floor:
            raise ValidationError(f"Invalid floor raise for {habit.id}: {state.floor} -> {new_floor}")
        if cooldown_active(state.last_raised, today, cfg.cooldown_days):
            raise ValidationError(f"{habit.id} floor was raised less than {cfg.cooldown_days} days ago")

        stamp = today.isoformat()
        history = (state.history + (FloorRecord(date=stamp, floor=new_floor),))[-cfg.history_limit:]
        floors = dict(book.floors)
        floors[habit.id] = state.model_copy(update={"floor": new_floor, "last_raised": stamp, "history": history})
        return book.model_copy(update={"floors": floors}), habit


def floor_status(consistency: int, floor: int) -> FloorStatus:
    """Where consistency sits relative to the floor. A zero floor is always "building"."""
    if floor == 0:
        return FloorStatus(*FLOOR_STATUS_BUILDING)
    diff = consistency - floor
    for minimum, status, message, color in FLOOR_STATUS_BANDS:
        if diff >= minimum:
            return FloorStatus(status, message, color)
    return FloorStatus(*FLOOR_STATUS_FALLBACK)


def should_suggest_easy_mode(consistency: int, floor: int, pool_level: float) -> bool:
    """Advisory: offer the 2-minute version. Never blocks a full completion."""
    if pool_level < 40:
        return True
    if consistency < floor:
        return True
    if consistency < 50:
        return True
    return False


def strategy_for_mode(mode: str, settings=None) -> RatchetStrategy:
    """Build the configured adjustment strategy."""
    if mode == "target":
        config = TargetRatchetConfig.from_settings(settings) if settings is not None else None
        return TargetEscalationStrategy(config)
    if mode == "floor":
        config = FloorRatchetConfig.from_settings(settings) if settings is not None else None
        return FloorRaiseStrategy(config)
    raise ConfigError(f"Unknown ratchet mode: {mode!r}")
