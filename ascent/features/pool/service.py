"""
Pool day lifecycle.

Copy-on-write operations over PoolState and the pool history. Every function
returns new values; the caller commits them to the record store.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional, Sequence, Tuple

from ascent.core.dates import hours_between, to_day, utc_now
from ascent.core.logging import log_event
from ascent.features.pool.engine import compute_current_level, compute_morning_level
from ascent.features.pool.tables import DEFAULT_POOL_TABLES, PoolTables
from ascent.models.pool import (
    CustomMappings,
    DailySummary,
    DrainEntry,
    MorningInputs,
    PoolSnapshot,
    PoolState,
    RechargeEntry,
    SummaryInsight,
)


def initialize_daily_pool(
    inputs: MorningInputs,
    day: date,
    now: Optional[datetime] = None,
    tables: PoolTables = DEFAULT_POOL_TABLES,
) -> PoolState:
    stamp = (now or utc_now()).isoformat()
    level = compute_morning_level(
        inputs.prior_day_complete,
        inputs.current_streak_days,
        inputs.last_sleep_hours,
        tables,
    )
    return PoolState(
        date=day.isoformat(),
        morning_level=level,
        current_level=level,
        wake_time=stamp,
        last_updated=stamp,
    )


def hours_since_wake(state: PoolState, now: Optional[datetime] = None) -> float:
    if not state.wake_time:
        return 0.0
    try:
        woke = datetime.fromisoformat(state.wake_time)
    except ValueError:
        return 0.0
    return hours_between(woke, now or utc_now())


def recompute(
    state: PoolState,
    now: Optional[datetime] = None,
    custom_mappings: Optional[CustomMappings] = None,
    tables: PoolTables = DEFAULT_POOL_TABLES,
) -> PoolState:
    moment = now or utc_now()
    level = compute_current_level(
        state.morning_level,
        state.drain_activities,
        state.recharge_activities,
        hours_since_wake(state, moment),
        custom_mappings,
        tables,
    )
    return state.model_copy(update={"current_level": level, "last_updated": moment.isoformat()})


def add_drain(
    state: PoolState,
    entry: DrainEntry,
    now: Optional[datetime] = None,
    custom_mappings: Optional[CustomMappings] = None,
    tables: PoolTables = DEFAULT_POOL_TABLES,
) -> PoolState:
    updated = state.model_copy(update={"drain_activities": state.drain_activities + (entry,)})
    return recompute(updated, now, custom_mappings, tables)


def add_recharge(
    state: PoolState,
    entry: RechargeEntry,
    now: Optional[datetime] = None,
    custom_mappings: Optional[CustomMappings] = None,
    tables: PoolTables = DEFAULT_POOL_TABLES,
) -> PoolState:
    updated = state.model_copy(update={"recharge_activities": state.recharge_activities + (entry,)})
    return recompute(updated, now, custom_mappings, tables)


def pool_snapshot(state: PoolState) -> PoolSnapshot:
    return PoolSnapshot(
        date=state.date,
        morning_level=state.morning_level,
        end_level=state.current_level,
        drains=len(state.drain_activities),
        recharges=len(state.recharge_activities),
    )


def append_snapshot(
    history: Sequence[PoolSnapshot],
    snapshot: PoolSnapshot,
    today: date,
    retention_days: int = 90,
) -> Tuple[PoolSnapshot, ...]:
    """Insert or replace the snapshot for its day, then keep the trailing window."""
    kept = [s for s in history if s.date != snapshot.date]
    kept.append(snapshot)
    cutoff = today - timedelta(days=retention_days)
    windowed = [s for s in kept if (to_day(s.date) or cutoff) > cutoff]
    windowed.sort(key=lambda s: s.date)
    return tuple(windowed[-retention_days:])


def roll_over_day(
    state: Optional[PoolState],
    history: Sequence[PoolSnapshot],
    inputs: MorningInputs,
    today: date,
    now: Optional[datetime] = None,
    retention_days: int = 90,
    tables: PoolTables = DEFAULT_POOL_TABLES,
) -> Tuple[PoolState, Tuple[PoolSnapshot, ...]]:
    """
    Start `today`'s pool.

    The outgoing day's state is summarized into the history. Calling this
    again on the same day is a no-op.
    """
    if state is not None and state.date == today.isoformat():
        return state, tuple(history)

    new_history = tuple(history)
    if state is not None:
        new_history = append_snapshot(history, pool_snapshot(state), today, retention_days)

    new_state = initialize_daily_pool(inputs, today, now, tables)
    log_event(
        "info",
        "pool.day_rolled_over",
        event_type="pool.rollover",
        extra={
            "day": new_state.date,
            "morning_level": new_state.morning_level,
            "history_len": len(new_history),
        },
    )
    return new_state, new_history


def daily_summary(
    history: Sequence[PoolSnapshot],
    state: Optional[PoolState],
    tables: PoolTables = DEFAULT_POOL_TABLES,
) -> Optional[DailySummary]:
    """
    Summarize `state`'s day, comparing its level with the snapshots for
    the day before and seven days before. None when there is no state.
    """
    if state is None:
        return None
    rules = tables.summary

    drains = sorted((d for d in state.drain_activities if d.impact < 0), key=lambda d: d.impact)
    total_drain = -sum(d.impact for d in drains)
    total_recovery = sum(r.boost for r in state.recharge_activities)

    end_levels = {s.date: s.end_level for s in history}
    day = to_day(state.date)
    vs_yesterday = vs_week_ago = None
    if day is not None:
        yesterday = end_levels.get((day - timedelta(days=1)).isoformat())
        week_ago = end_levels.get((day - timedelta(days=7)).isoformat())
        vs_yesterday = state.current_level - yesterday if yesterday is not None else None
        vs_week_ago = state.current_level - week_ago if week_ago is not None else None

    insights = []
    if total_drain > rules.heavy_drain:
        insights.append(SummaryInsight("warning", rules.heavy_drain_message))
    if total_recovery > rules.strong_recovery:
        insights.append(SummaryInsight("positive", rules.strong_recovery_message))
    if vs_week_ago is not None and vs_week_ago > rules.baseline_shift:
        insights.append(SummaryInsight("positive", rules.trending_up_message))
    elif vs_week_ago is not None and vs_week_ago < -rules.baseline_shift:
        insights.append(SummaryInsight("warning", rules.trending_down_message))

    return DailySummary(
        date=state.date,
        morning_level=state.morning_level,
        end_level=state.current_level,
        net_change=state.current_level - state.morning_level,
        total_drain=total_drain,
        total_recovery=total_recovery,
        top_drains=tuple(drains[:rules.top_drains]),
        recovery_activities=state.recharge_activities,
        vs_yesterday=vs_yesterday,
        vs_week_ago=vs_week_ago,
        insights=tuple(insights),
    )
