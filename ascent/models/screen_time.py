"""
Screen-time models for cross-titration tracking.

ScreenTimeEntry is persisted (one per day, replace on re-record). The report
types are derived on demand and never stored.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ScreenTimeEntry(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    date: str  # YYYY-MM-DD in the reference zone
    total_minutes: float = Field(default=0, ge=0)
    drain_minutes: float = Field(default=0, ge=0)
    recharge_minutes: float = Field(default=0, ge=0)
    per_app: Dict[str, float] = Field(default_factory=dict)


@dataclass(frozen=True)
class WeeklyTitration:
    week_number: int  # 1 = current week
    week_start: str
    avg_drain_minutes: float
    completion_rate: float

    def to_dict(self) -> dict:
        return {
            "weekNumber": self.week_number,
            "weekStart": self.week_start,
            "avgDrainMinutes": self.avg_drain_minutes,
            "completionRate": self.completion_rate,
        }


@dataclass(frozen=True)
class TitrationReport:
    has_enough_data: bool
    message: str
    status: Optional[str] = None  # positive | negative | building | neutral
    insight: str = ""
    drain_trend: int = 0
    completion_trend: int = 0
    recent_drain_avg: int = 0
    recent_completion_avg: int = 0
    weekly_data: Tuple[WeeklyTitration, ...] = field(default_factory=tuple)  # oldest first

    def to_dict(self) -> dict:
        if not self.has_enough_data:
            return {"hasEnoughData": False, "message": self.message}
        return {
            "hasEnoughData": True,
            "status": self.status,
            "message": self.message,
            "insight": self.insight,
            "drainTrend": self.drain_trend,
            "completionTrend": self.completion_trend,
            "recentDrainAvg": self.recent_drain_avg,
            "recentCompletionAvg": self.recent_completion_avg,
            "weeklyData": [w.to_dict() for w in self.weekly_data],
        }
