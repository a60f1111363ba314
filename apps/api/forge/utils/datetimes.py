"""Datetime helpers shared by alert checks."""

from __future__ import annotations

import calendar
from datetime import datetime, timedelta, timezone


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def days_since(value: datetime, now: datetime) -> int:
    """Whole days elapsed between ``value`` and ``now`` (floored)."""
    return int((ensure_utc(now) - ensure_utc(value)).total_seconds() // 86400)


def start_of_month(now: datetime) -> datetime:
    now = ensure_utc(now)
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def days_remaining_in_month(now: datetime) -> int:
    """Days left after today in the current month (0 on the last day)."""
    last_day = calendar.monthrange(now.year, now.month)[1]
    return last_day - now.day


def week_start(now: datetime) -> datetime:
    """Monday 00:00 UTC of the current week."""
    now = ensure_utc(now)
    monday = now - timedelta(days=now.weekday())
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)
