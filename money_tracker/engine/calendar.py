"""
Calendar Utilities

All windowing in the engine is done on ISO day keys (``YYYY-MM-DD``).
ISO keys sort lexicographically in chronological order, so range checks
are plain string comparisons.

Weeks run Monday through Sunday. This is fixed, not configurable.
"""

from datetime import date, timedelta
from typing import Union

from money_tracker.validation.normalize import DayKey

DAYS_PER_WEEK = 7


def today_key() -> DayKey:
    """Current local calendar day. No time-of-day, no timezone conversion."""
    return date.today().isoformat()


def _as_date(day: Union[date, DayKey]) -> date:
    if isinstance(day, date):
        return day
    return date.fromisoformat(day[:10])


def add_days(key: DayKey, days: int) -> DayKey:
    """Shift a day key by ``days`` calendar days (negative moves back)."""
    return (_as_date(key) + timedelta(days=days)).isoformat()


def week_start(day: Union[date, DayKey]) -> DayKey:
    """The Monday on or before ``day``."""
    d = _as_date(day)
    return (d - timedelta(days=d.weekday())).isoformat()


def week_end(week_start_key: DayKey) -> DayKey:
    """The Sunday closing the week that starts on ``week_start_key``."""
    return add_days(week_start_key, DAYS_PER_WEEK - 1)


def in_range(key: DayKey, start_key: DayKey, end_key: DayKey) -> bool:
    """Inclusive range membership on day keys."""
    return start_key <= key <= end_key


def month_key(key: str) -> str:
    """``YYYY-MM`` prefix of a day key; empty for a missing key."""
    return (key or "")[:7]
