"""
Where daily per-app screen-time minutes come from.

The OS usage bridge is not part of this package; callers plug in any object
with a `usage_for(day)` method. ManualScreenTimeSource covers tests and
user-entered minutes.
"""

from datetime import date
from typing import Dict, Mapping, Optional, Protocol


class ScreenTimeSource(Protocol):
    def usage_for(self, day: date) -> Optional[Mapping[str, float]]:
        """Minutes per app for `day`, or None if nothing was collected."""
        ...


class ManualScreenTimeSource:
    def __init__(self, usage: Optional[Mapping[date, Mapping[str, float]]] = None):
        self._usage: Dict[date, Dict[str, float]] = {
            day: dict(per_app) for day, per_app in (usage or {}).items()
        }

    def set_usage(self, day: date, minutes_by_app: Mapping[str, float]) -> None:
        self._usage[day] = dict(minutes_by_app)

    def add_minutes(self, day: date, app: str, minutes: float) -> None:
        per_app = self._usage.setdefault(day, {})
        per_app[app] = per_app.get(app, 0) + minutes

    def usage_for(self, day: date) -> Optional[Mapping[str, float]]:
        found = self._usage.get(day)
        return dict(found) if found is not None else None
