"""
Ratchet domain models.

Two persisted representations exist, one per adjustment strategy:
- target mode keeps the current numeric target and an append-only event log;
- floor mode keeps a non-decreasing consistency floor and its last raises.

A RatchetBook holds both maps but a deployment only ever writes the one that
matches its configured mode.
"""

from dataclasses import dataclass
from typing import Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

RatchetMode = Literal["floor", "target"]
RatchetDirection = Literal["up", "down"]
InsightTone = Literal["acknowledgment", "informational", "supportive", "coaching"]

_MODEL_CONFIG = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class RatchetEvent(BaseModel):
    model_config = _MODEL_CONFIG

    date: str
    previous_target: int
    new_target: int
    direction: RatchetDirection


class TargetRatchetState(BaseModel):
    model_config = _MODEL_CONFIG

    habit_id: str
    current_target: int = Field(ge=1)
    last_ratchet_date: Optional[str] = None
    events: Tuple[RatchetEvent, ...] = ()


class FloorRecord(BaseModel):
    model_config = _MODEL_CONFIG

    date: str
    floor: int


class FloorRatchetState(BaseModel):
    model_config = _MODEL_CONFIG

    habit_id: str
    floor: int = Field(default=0, ge=0, le=100)
    last_raised: Optional[str] = None
    history: Tuple[FloorRecord, ...] = ()


class RatchetBook(BaseModel):
    model_config = _MODEL_CONFIG

    mode: RatchetMode = "floor"
    consistency_window: int = Field(default=14, ge=1)
    targets: Dict[str, TargetRatchetState] = Field(default_factory=dict)
    floors: Dict[str, FloorRatchetState] = Field(default_factory=dict)


@dataclass(frozen=True)
class RatchetRecommendation:
    """
    A proposed adjustment for one habit.

    `before`/`after` are targets in target mode and floor percentages in
    floor mode. Downward recommendations are advisory and never applied
    without an explicit opt-in.
    """

    habit_id: str
    habit_name: str
    mode: RatchetMode
    direction: RatchetDirection
    before: int
    after: int
    consistency: int
    message: str
    recommendation: str = ""
    increment: int = 0

    def to_dict(self) -> dict:
        return {
            "habitId": self.habit_id,
            "habitName": self.habit_name,
            "mode": self.mode,
            "type": self.direction,
            "before": self.before,
            "after": self.after,
            "increment": self.increment,
            "consistency": self.consistency,
            "message": self.message,
            "recommendation": self.recommendation,
        }


@dataclass(frozen=True)
class FloorStatus:
    status: str
    message: str
    color: str


@dataclass(frozen=True)
class RatchetInsight:
    type: str
    message: str
    tone: InsightTone

    def to_dict(self) -> dict:
        return {"type": self.type, "message": self.message, "tone": self.tone}
