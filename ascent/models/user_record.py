"""
The single versioned user record persisted by the record store.

Keys missing from an older blob load with their defaults, so adding a field
never needs a migration. Removing or re-typing one bumps SCHEMA_VERSION.
"""

from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ascent.models.habit import CompletionRecord, Habit
from ascent.models.pool import PoolSnapshot, PoolState
from ascent.models.ratchet import RatchetBook
from ascent.models.screen_time import ScreenTimeEntry

SCHEMA_VERSION = 1


class UserRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    schema_version: int = SCHEMA_VERSION
    habits: Tuple[Habit, ...] = ()
    completions: Tuple[CompletionRecord, ...] = ()
    pool_state: Optional[PoolState] = None
    pool_history: Tuple[PoolSnapshot, ...] = ()
    ratchet: RatchetBook = Field(default_factory=RatchetBook)
    screen_time_history: Tuple[ScreenTimeEntry, ...] = ()
    custom_app_mappings: Dict[str, str] = Field(default_factory=dict)
    last_sleep_hours: Optional[float] = None
