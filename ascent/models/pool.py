"""
Dopamine pool models.

One PoolState per calendar day. Drain and recharge entries are write-once and
appended to the day's state; the state itself is replaced (never mutated) on
every change. At day rollover the outgoing state is summarized into a
PoolSnapshot appended to the pool history.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_MODEL_CONFIG = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class DrainEntry(BaseModel):
    model_config = _MODEL_CONFIG

    app: str
    minutes: float = Field(ge=0)
    impact: int = 0  # rounded pool change, negative for draining apps
    category: Optional[str] = None
    timestamp: Optional[str] = None


class RechargeEntry(BaseModel):
    model_config = _MODEL_CONFIG

    activity_type: Optional[str] = None
    intensity: Optional[str] = None
    minutes: Optional[float] = None
    boost: float = 0
    label: Optional[str] = None
    timestamp: Optional[str] = None
    error: Optional[str] = None  # "unknown_activity" when the catalog has no entry


class PoolState(BaseModel):
    model_config = _MODEL_CONFIG

    date: str  # YYYY-MM-DD in the reference zone
    morning_level: int = Field(default=65, ge=0, le=100)
    current_level: int = Field(default=65, ge=0, le=100)
    drain_activities: Tuple[DrainEntry, ...] = ()
    recharge_activities: Tuple[RechargeEntry, ...] = ()
    wake_time: Optional[str] = None
    last_updated: Optional[str] = None


class PoolSnapshot(BaseModel):
    model_config = _MODEL_CONFIG

    date: str
    morning_level: int
    end_level: int
    drains: int = 0
    recharges: int = 0


@dataclass(frozen=True)
class MorningInputs:
    prior_day_complete: bool = False
    current_streak_days: int = 0
    last_sleep_hours: Optional[float] = None


@dataclass(frozen=True)
class PoolStatus:
    """Display-ready pool status for UI collaborators."""

    status: str
    message: str
    suggestion: str
    color: str

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "message": self.message,
            "suggestion": self.suggestion,
            "color": self.color,
        }


@dataclass(frozen=True)
class DrainItem:
    app: str
    minutes: float
    impact: int
    category: str


@dataclass(frozen=True)
class DrainBreakdown:
    total_drain: int
    items: Tuple[DrainItem, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "totalDrain": self.total_drain,
            "breakdown": [
                {"app": i.app, "minutes": i.minutes, "impact": i.impact, "category": i.category}
                for i in self.items
            ],
        }


@dataclass(frozen=True)
class RecoverySuggestion:
    activity_type: str
    intensity: str
    priority: int
    reason: str

    def to_dict(self) -> dict:
        return {
            "activityType": self.activity_type,
            "intensity": self.intensity,
            "priority": self.priority,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class SummaryInsight:
    type: str  # warning | positive
    message: str

    def to_dict(self) -> dict:
        return {"type": self.type, "message": self.message}


@dataclass(frozen=True)
class DailySummary:
    """End-of-day view of one PoolState against the pool history."""

    date: str
    morning_level: int
    end_level: int
    net_change: int
    total_drain: int
    total_recovery: float
    top_drains: Tuple[DrainEntry, ...] = ()
    recovery_activities: Tuple[RechargeEntry, ...] = ()
    vs_yesterday: Optional[int] = None
    vs_week_ago: Optional[int] = None
    insights: Tuple[SummaryInsight, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "morningLevel": self.morning_level,
            "endLevel": self.end_level,
            "netChange": self.net_change,
            "totalDrain": self.total_drain,
            "totalRecovery": self.total_recovery,
            "topDrains": [d.model_dump(by_alias=True) for d in self.top_drains],
            "recoveryActivities": [r.model_dump(by_alias=True) for r in self.recovery_activities],
            "vsYesterday": self.vs_yesterday,
            "vsWeekAgo": self.vs_week_ago,
            "insights": [i.to_dict() for i in self.insights],
        }


CustomMappings = Dict[str, str]
