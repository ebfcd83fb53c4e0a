"""
Habit domain models.

Habits are owned by the user profile. `target_amount` is only ever changed by
the ratchet engine (or by the user through a rename/edit flow outside this
package). Completion records are append-only; the latest record for a
(habit, calendar day) pair is authoritative.
"""

import datetime as dt
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Habit(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    id: str
    name: str
    unit: str = ""
    target_amount: int = Field(default=1, ge=1, description="Per-day target, raised by the ratchet")
    resistance: int = Field(default=5, ge=1, le=10, description="Subjective difficulty, ordering only")


class CompletionRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    habit_id: str
    date: str = Field(description="ISO date or timestamp of the completion")
    completed: bool = True

    @field_validator("date", mode="before")
    @classmethod
    def _stringify_date(cls, value: Union[str, dt.date, dt.datetime]):
        if isinstance(value, (dt.date, dt.datetime)):
            return value.isoformat()
        return value
