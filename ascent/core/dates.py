"""
Calendar-day helpers shared by every engine.

All "same day" comparisons go through a timezone-explicit date key
(YYYY-MM-DD in a fixed reference zone). Naive datetimes are treated as UTC.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import List, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DayLike = Union[date, datetime, str]

_WEEKDAY_INDEX = {"monday": 0, "sunday": 6}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def reference_zone(name: Optional[str] = None) -> Optional[tzinfo]:
    """Resolve an IANA zone name; None for unknown names."""
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return None


def _parse_datetime(text: str) -> Optional[datetime]:
    candidate = text.strip()
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(candidate)
    except ValueError:
        return None


def to_day(value: Optional[DayLike], tz: Optional[tzinfo] = None) -> Optional[date]:
    """Normalize a date, datetime or ISO string to a calendar day in `tz`.

    Returns None for anything that cannot be read as a day.
    """
    zone = tz or timezone.utc
    if value is None:
        return None
    if isinstance(value, datetime):
        aware = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        return aware.astimezone(zone).date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            try:
                return date.fromisoformat(text)
            except ValueError:
                return None
        parsed = _parse_datetime(text)
        return to_day(parsed, zone) if parsed else None
    return None


def day_key(value: Optional[DayLike], tz: Optional[tzinfo] = None) -> Optional[str]:
    day = to_day(value, tz)
    return day.isoformat() if day else None


def today(tz: Optional[tzinfo] = None, now: Optional[datetime] = None) -> date:
    moment = now or utc_now()
    return to_day(moment, tz)


def local_hour(tz: Optional[tzinfo] = None, now: Optional[datetime] = None) -> int:
    moment = now or utc_now()
    aware = moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)
    return aware.astimezone(tz or timezone.utc).hour


def days_between(earlier: date, later: date) -> int:
    """Whole calendar days from `earlier` to `later` (negative if reversed)."""
    return (later - earlier).days


def trailing_days(end: date, window_days: int) -> List[date]:
    """The `window_days` calendar days ending at (and including) `end`, newest first."""
    return [end - timedelta(days=offset) for offset in range(max(0, window_days))]


def in_trailing_window(day: date, end: date, window_days: int) -> bool:
    return 0 <= days_between(day, end) < window_days


def start_of_week(day: date, week_start: str = "sunday") -> date:
    first = _WEEKDAY_INDEX.get(week_start.lower(), 6)
    offset = (day.weekday() - first) % 7
    return day - timedelta(days=offset)


def hours_between(start: datetime, end: datetime) -> float:
    """Elapsed hours, never negative."""
    start_aware = start if start.tzinfo else start.replace(tzinfo=timezone.utc)
    end_aware = end if end.tzinfo else end.replace(tzinfo=timezone.utc)
    return max(0.0, (end_aware - start_aware).total_seconds() / 3600.0)
