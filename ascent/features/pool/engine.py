"""
Dopamine Pool Engine

Pure, deterministic computation of the daily behavioral-energy pool.
No I/O, no clock reads (callers pass `now`), no mutation of inputs.

Model:
- Morning baseline starts at 65 and moves with yesterday's completion,
  streak length and sleep; clamped to 20..100.
- During the day, drain apps subtract minutes x category rate, recharge
  activities add a fixed boost, and time awake adds +1 per hour.
- Current level is rounded and clamped to 0..100 after every change.
"""

from datetime import datetime
from typing import Iterable, Mapping, Optional, Sequence, TypeVar

from ascent.core.dates import utc_now
from ascent.core.numbers import clamp, round_half_up
from ascent.features.pool.tables import DEFAULT_POOL_TABLES, PoolTables
from ascent.models.pool import (
    CustomMappings,
    DrainBreakdown,
    DrainEntry,
    DrainItem,
    PoolStatus,
    RechargeEntry,
    RecoverySuggestion,
)

UNKNOWN_ACTIVITY = "unknown_activity"

HabitT = TypeVar("HabitT")


def compute_morning_level(
    prior_day_complete: bool,
    current_streak_days: int,
    last_sleep_hours: Optional[float],
    tables: PoolTables = DEFAULT_POOL_TABLES,
) -> int:
    """
    Morning pool baseline, 20..100.

    Streak bonuses are cumulative (a 60-day streak earns all three). A
    missing sleep value applies no modifier.
    """
    rules = tables.morning
    level = rules.baseline

    if prior_day_complete:
        level += rules.prior_day_bonus

    streak = current_streak_days or 0
    for min_days, bonus in rules.streak_bonuses:
        if streak >= min_days:
            level += bonus

    level += _sleep_modifier(last_sleep_hours, tables)

    return int(clamp(level, rules.min_level, rules.max_level))


def _sleep_modifier(hours: Optional[float], tables: PoolTables) -> int:
    if hours is None:
        return 0
    for min_hours, modifier in tables.morning.sleep_bonuses:
        if hours >= min_hours:
            return modifier
    return tables.morning.short_sleep_penalty


def compute_current_level(
    morning_level: float,
    drain_activities: Iterable[DrainEntry] = (),
    recharge_activities: Iterable[RechargeEntry] = (),
    hours_since_wake: float = 0,
    custom_mappings: Optional[CustomMappings] = None,
    tables: PoolTables = DEFAULT_POOL_TABLES,
) -> int:
    """Current pool level, 0..100."""
    pool = float(morning_level)

    for activity in drain_activities:
        category = category_for_app(activity.app, custom_mappings, tables)
        pool += activity.minutes * rate_for_category(category, tables)

    for activity in recharge_activities:
        pool += activity.boost

    pool += max(0.0, hours_since_wake or 0) * tables.recovery_per_hour

    return int(clamp(round_half_up(pool), 0, 100))


def category_for_app(
    app_name: str,
    custom_mappings: Optional[CustomMappings] = None,
    tables: PoolTables = DEFAULT_POOL_TABLES,
) -> str:
    """Resolve an app to a drain category; user overrides win, default is utility."""
    if custom_mappings:
        if app_name in custom_mappings:
            return custom_mappings[app_name]
        lowered_overrides = {k.lower(): v for k, v in custom_mappings.items()}
        if app_name.lower() in lowered_overrides:
            return lowered_overrides[app_name.lower()]

    lower_name = app_name.lower()
    for category in tables.drain_categories:
        if any(app.lower() in lower_name for app in category.apps):
            return category.name

    return tables.default_category


def rate_for_category(category: str, tables: PoolTables = DEFAULT_POOL_TABLES) -> float:
    """Per-minute rate; categories missing from the table are neutral."""
    found = tables.category(category)
    return found.rate if found else 0.0


def log_drain_activity(
    app_name: str,
    minutes: float,
    custom_mappings: Optional[CustomMappings] = None,
    now: Optional[datetime] = None,
    tables: PoolTables = DEFAULT_POOL_TABLES,
) -> DrainEntry:
    """Build a self-reported drain entry with its category and rounded impact."""
    category = category_for_app(app_name, custom_mappings, tables)
    impact = round_half_up(minutes * rate_for_category(category, tables))
    return DrainEntry(
        app=app_name,
        minutes=minutes,
        impact=impact,
        category=category,
        timestamp=(now or utc_now()).isoformat(),
    )


def log_recharge_activity(
    activity_type: str,
    intensity: str,
    now: Optional[datetime] = None,
    tables: PoolTables = DEFAULT_POOL_TABLES,
) -> RechargeEntry:
    """
    Build a recharge entry from the catalog.

    Unknown type/intensity combinations yield a zero-boost entry flagged with
    error="unknown_activity" instead of raising.
    """
    activity = tables.recharge_activity(activity_type, intensity)
    timestamp = (now or utc_now()).isoformat()

    if activity is None:
        return RechargeEntry(
            activity_type=activity_type,
            intensity=intensity,
            boost=0,
            timestamp=timestamp,
            error=UNKNOWN_ACTIVITY,
        )

    return RechargeEntry(
        activity_type=activity_type,
        intensity=intensity,
        minutes=activity.minutes,
        boost=activity.boost,
        label=activity.label,
        timestamp=timestamp,
    )


def drain_breakdown(
    minutes_by_app: Mapping[str, float],
    custom_mappings: Optional[CustomMappings] = None,
    tables: PoolTables = DEFAULT_POOL_TABLES,
) -> DrainBreakdown:
    """Per-app pool impact of a day's screen time, most draining first."""
    total = 0.0
    items = []
    for app_name, minutes in minutes_by_app.items():
        category = category_for_app(app_name, custom_mappings, tables)
        drain = minutes * rate_for_category(category, tables)
        if drain == 0:
            continue
        total += drain
        items.append(DrainItem(app=app_name, minutes=minutes, impact=round_half_up(drain), category=category))

    items.sort(key=lambda item: item.impact)
    return DrainBreakdown(total_drain=round_half_up(total), items=tuple(items))


def pool_status(level: float, tables: PoolTables = DEFAULT_POOL_TABLES) -> PoolStatus:
    for band in tables.status_bands:
        if level >= band.min_level:
            return PoolStatus(status=band.status, message=band.message, suggestion=band.suggestion, color=band.color)
    last = tables.status_bands[-1]
    return PoolStatus(status=last.status, message=last.message, suggestion=last.suggestion, color=last.color)


def order_by_pool_level(habits: Sequence[HabitT], level: float, high_energy_level: int = 60) -> list:
    """
    Recommended habit order for the current pool level.

    High pool: hardest (highest resistance) first. Otherwise easiest first.
    Ties keep their input order.
    """
    def resistance(habit) -> int:
        return getattr(habit, "resistance", None) or 5

    if level >= high_energy_level:
        return sorted(habits, key=lambda h: -resistance(h))
    return sorted(habits, key=resistance)


def recovery_suggestions(
    level: float,
    hour: int,
    recent: Iterable[RechargeEntry] = (),
    tables: PoolTables = DEFAULT_POOL_TABLES,
) -> list:
    """
    Recharge ideas for the current level and local hour, in rule order.

    Rules whose `skip_if_recent` marker matches one of today's recharges are
    left out. At most `tables.max_suggestions` items.
    """
    done = [f"{r.activity_type or ''}:{r.intensity or ''}".lower() for r in recent]
    suggestions = []
    for rule in tables.recovery_rules:
        if not (rule.min_hour <= hour < rule.max_hour and rule.min_level <= level < rule.max_level):
            continue
        if rule.skip_if_recent and any(rule.skip_if_recent in key for key in done):
            continue
        suggestions.append(RecoverySuggestion(
            activity_type=rule.activity_type,
            intensity=rule.intensity,
            priority=rule.priority,
            reason=rule.reason,
        ))
    return suggestions[:tables.max_suggestions]
