"""
Cross-titration content tables: app substrings and report templates.

The substring lists are narrower than the pool's drain categories and only
separate "drain" from "recharge" minutes.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Tuple

# status -> (message, insight). Insight fields: drain_pct, completion_pct
STATUS_TEMPLATES: Mapping[str, Tuple[str, str]] = MappingProxyType({
    "positive": (
        "Cross-titration is working",
        "Drain app usage is down {drain_pct}% while habit completion is up {completion_pct}%. "
        "Your brain is naturally redirecting.",
    ),
    "negative": (
        "Drain apps are competing",
        "Screen time is up {drain_pct}% and habits are down. "
        "Consider protecting morning pool with a screen-free routine.",
    ),
    "building": (
        "Habits strengthening",
        "Completion rate is up {completion_pct}%. Keep going - the cross-titration effect often follows.",
    ),
    "neutral": (
        "Building baseline",
        "Continue tracking to see patterns emerge. Neural adaptation takes time.",
    ),
})

NOT_ENOUGH_DATA_MESSAGE = "Track screen time for 2+ weeks to see cross-titration patterns."


@dataclass(frozen=True)
class TitrationTables:
    drain_apps: Tuple[str, ...] = ("twitter", "instagram", "tiktok", "facebook", "reddit", "youtube", "netflix")
    recharge_apps: Tuple[str, ...] = ("meditation", "headspace", "calm", "nike training", "strava")
    status_templates: Mapping[str, Tuple[str, str]] = field(default_factory=lambda: STATUS_TEMPLATES)
    not_enough_data_message: str = NOT_ENOUGH_DATA_MESSAGE
    # percentage-change thresholds
    shift_threshold: float = 10.0
    building_threshold: float = 15.0


@dataclass(frozen=True)
class TitrationConfig:
    min_days: int = 14
    min_points: int = 10
    score_window_days: int = 30
    weeks: int = 8
    retention_days: int = 90
    week_start: str = "sunday"

    @classmethod
    def from_settings(cls, settings) -> "TitrationConfig":
        return cls(
            min_days=settings.TITRATION_MIN_DAYS,
            min_points=settings.TITRATION_MIN_POINTS,
            score_window_days=settings.TITRATION_SCORE_WINDOW_DAYS,
            weeks=settings.TITRATION_WEEKS,
            retention_days=settings.HISTORY_RETENTION_DAYS,
            week_start=settings.WEEK_START,
        )


DEFAULT_TITRATION_TABLES = TitrationTables()
DEFAULT_TITRATION_CONFIG = TitrationConfig()
