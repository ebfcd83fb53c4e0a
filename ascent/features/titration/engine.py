"""
Cross-Titration Engine

Relates drain-app screen time to habit completion over time.
Pure and deterministic: every function takes `today` explicitly and returns
new values without touching its inputs.

Two views:
- cross_titration(): 8 calendar weeks split into recent/older halves,
  percentage change of drain minutes and completion rate, classified as
  positive / negative / building / neutral.
- titration_score(): Pearson correlation of daily drain minutes against daily
  completion rate over the last 30 days, mapped so that a perfect inverse
  relationship scores 100 and a perfect positive one scores 0.
"""

from __future__ import annotations

import math
import statistics
from collections import defaultdict
from datetime import date, timedelta, tzinfo
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ascent.core.dates import start_of_week, to_day
from ascent.core.numbers import clamp, percent_change, round_half_away, round_half_up
from ascent.features.history import latest_by_day
from ascent.features.titration.tables import (
    DEFAULT_TITRATION_CONFIG,
    DEFAULT_TITRATION_TABLES,
    TitrationConfig,
    TitrationTables,
)
from ascent.models.habit import CompletionRecord
from ascent.models.screen_time import ScreenTimeEntry, TitrationReport, WeeklyTitration

NEUTRAL_SCORE = 50


def classify_minutes(
    minutes_by_app: Mapping[str, float],
    tables: TitrationTables = DEFAULT_TITRATION_TABLES,
) -> Tuple[float, float]:
    """(drain_minutes, recharge_minutes) by case-insensitive substring match."""
    drain = 0.0
    recharge = 0.0
    for app, minutes in minutes_by_app.items():
        lowered = app.lower()
        if any(marker in lowered for marker in tables.drain_apps):
            drain += minutes
        if any(marker in lowered for marker in tables.recharge_apps):
            recharge += minutes
    return drain, recharge


def trim_history(
    history: Sequence[ScreenTimeEntry],
    today: date,
    retention_days: int,
) -> Tuple[ScreenTimeEntry, ...]:
    """Keep entries inside the trailing window, at most one per day, oldest first."""
    cutoff = today - timedelta(days=retention_days)
    by_day: Dict[date, ScreenTimeEntry] = {}
    for entry in history:
        day = to_day(entry.date)
        if day is None or day <= cutoff:
            continue
        by_day[day] = entry
    ordered = [by_day[day] for day in sorted(by_day)]
    return tuple(ordered[-retention_days:])


def record_screen_time(
    minutes_by_app: Mapping[str, float],
    day: date,
    history: Sequence[ScreenTimeEntry] = (),
    total_minutes: Optional[float] = None,
    today: Optional[date] = None,
    config: TitrationConfig = DEFAULT_TITRATION_CONFIG,
    tables: TitrationTables = DEFAULT_TITRATION_TABLES,
) -> Tuple[ScreenTimeEntry, ...]:
    """
    Append or replace `day`'s entry and evict anything outside the
    retention window. Returns the new history; the input is untouched.
    """
    drain, recharge = classify_minutes(minutes_by_app, tables)
    entry = ScreenTimeEntry(
        date=day.isoformat(),
        total_minutes=total_minutes if total_minutes is not None else sum(minutes_by_app.values()),
        drain_minutes=drain,
        recharge_minutes=recharge,
        per_app=dict(minutes_by_app),
    )
    kept = [e for e in history if to_day(e.date) != day]
    kept.append(entry)
    return trim_history(kept, max(today or day, day), config.retention_days)


def _weekly_rows(
    history: Sequence[ScreenTimeEntry],
    completions: Sequence[CompletionRecord],
    today: date,
    config: TitrationConfig,
    tz: Optional[tzinfo],
) -> List[WeeklyTitration]:
    drain_by_day: Dict[date, float] = {}
    for entry in history:
        day = to_day(entry.date)
        if day is not None:
            drain_by_day[day] = entry.drain_minutes

    flags_by_day: Dict[date, List[bool]] = defaultdict(list)
    for (_habit_id, day), done in latest_by_day(completions, tz).items():
        flags_by_day[day].append(done)

    current_week = start_of_week(today, config.week_start)
    rows = []
    for w in range(config.weeks):
        start = current_week - timedelta(days=7 * w)
        days = [start + timedelta(days=i) for i in range(7)]

        drains = [drain_by_day[d] for d in days if d in drain_by_day]
        flags = [flag for d in days for flag in flags_by_day.get(d, ())]

        rows.append(WeeklyTitration(
            week_number=w + 1,
            week_start=start.isoformat(),
            avg_drain_minutes=statistics.mean(drains) if drains else 0.0,
            completion_rate=(sum(flags) / len(flags) * 100) if flags else 0.0,
        ))
    return rows


def _trend(recent: float, older: Optional[float]) -> float:
    baseline = older if older else recent
    return percent_change(recent, baseline)


def cross_titration(
    history: Sequence[ScreenTimeEntry],
    completions: Sequence[CompletionRecord],
    today: date,
    config: TitrationConfig = DEFAULT_TITRATION_CONFIG,
    tables: TitrationTables = DEFAULT_TITRATION_TABLES,
    tz: Optional[tzinfo] = None,
) -> TitrationReport:
    if len(history) < config.min_days:
        return TitrationReport(has_enough_data=False, message=tables.not_enough_data_message)

    weeks = _weekly_rows(history, completions, today, config, tz)
    half = max(1, len(weeks) // 2)
    recent, older = weeks[:half], weeks[half:]

    recent_drain = statistics.mean(w.avg_drain_minutes for w in recent)
    recent_completion = statistics.mean(w.completion_rate for w in recent)
    older_drain = statistics.mean(w.avg_drain_minutes for w in older) if older else None
    older_completion = statistics.mean(w.completion_rate for w in older) if older else None

    drain_trend = _trend(recent_drain, older_drain)
    completion_trend = _trend(recent_completion, older_completion)

    shift = tables.shift_threshold
    if drain_trend < -shift and completion_trend > shift:
        status = "positive"
    elif drain_trend > shift and completion_trend < -shift:
        status = "negative"
    elif completion_trend > tables.building_threshold:
        status = "building"
    else:
        status = "neutral"

    message, insight_template = tables.status_templates[status]
    insight = insight_template.format(
        drain_pct=abs(round_half_up(drain_trend)),
        completion_pct=round_half_up(completion_trend),
    )

    return TitrationReport(
        has_enough_data=True,
        status=status,
        message=message,
        insight=insight,
        drain_trend=round_half_up(drain_trend),
        completion_trend=round_half_up(completion_trend),
        recent_drain_avg=round_half_up(recent_drain),
        recent_completion_avg=round_half_up(recent_completion),
        weekly_data=tuple(reversed(weeks)),
    )


def pearson(xs: Sequence[float], ys: Sequence[float]) -> Optional[float]:
    """Pearson correlation, or None when either series has zero variance."""
    if len(xs) != len(ys) or len(xs) < 2:
        return None
    mean_x = statistics.mean(xs)
    mean_y = statistics.mean(ys)
    dx = [x - mean_x for x in xs]
    dy = [y - mean_y for y in ys]
    denominator = math.sqrt(sum(a * a for a in dx) * sum(b * b for b in dy))
    if denominator == 0:
        return None
    r = sum(a * b for a, b in zip(dx, dy)) / denominator
    return clamp(r, -1.0, 1.0)


def score_from_correlation(correlation: float) -> int:
    """
    Map r in [-1, 1] to 0..100 with -1 -> 100, 0 -> 50, +1 -> 0.

    Rounds symmetrically around 50 so score(r) + score(-r) == 100.
    """
    r = clamp(correlation, -1.0, 1.0)
    return int(clamp(NEUTRAL_SCORE - round_half_away(r * NEUTRAL_SCORE), 0, 100))


def daily_points(
    history: Sequence[ScreenTimeEntry],
    completions: Sequence[CompletionRecord],
    today: date,
    window_days: int,
    tz: Optional[tzinfo] = None,
) -> List[Tuple[float, float]]:
    """(drain_minutes, completion_rate) for each day in the window having both."""
    drain_by_day: Dict[date, float] = {}
    for entry in history:
        day = to_day(entry.date)
        if day is not None:
            drain_by_day[day] = entry.drain_minutes

    flags_by_day: Dict[date, List[bool]] = defaultdict(list)
    for (_habit_id, day), done in latest_by_day(completions, tz).items():
        flags_by_day[day].append(done)

    points = []
    for offset in range(window_days):
        day = today - timedelta(days=offset)
        flags = flags_by_day.get(day)
        if day in drain_by_day and flags:
            points.append((drain_by_day[day], sum(flags) / len(flags) * 100))
    return points


def titration_score(
    history: Sequence[ScreenTimeEntry],
    completions: Sequence[CompletionRecord],
    today: date,
    config: TitrationConfig = DEFAULT_TITRATION_CONFIG,
    tz: Optional[tzinfo] = None,
) -> Optional[int]:
    """0..100 substitution score, or None when there is not enough data."""
    if len(history) < config.min_days:
        return None

    points = daily_points(history, completions, today, config.score_window_days, tz)
    if len(points) < config.min_points:
        return None

    correlation = pearson([p[0] for p in points], [p[1] for p in points])
    if correlation is None:
        return NEUTRAL_SCORE
    return score_from_correlation(correlation)
