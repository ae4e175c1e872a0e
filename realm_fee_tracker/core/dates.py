"""
Date helpers for the tracking window.

Config dates are MM-DD-YYYY and interpreted in UTC: the start date maps to
00:00:00 of that day, the end date to 23:59:59 so the window is inclusive.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

MIN_YEAR = 2020
MAX_YEAR = 2100

_DATE_RE = re.compile(r"^\d{2}-\d{2}-\d{4}$")


def is_valid_date_format(value: str) -> bool:
    """Return True if value looks like MM-DD-YYYY (shape only, not calendar validity)."""
    return isinstance(value, str) and bool(_DATE_RE.match(value))


def _parse_day(value: str) -> datetime:
    if not is_valid_date_format(value):
        raise ValueError(f"Invalid date format: {value}. Expected MM-DD-YYYY")
    month, day, year = (int(p) for p in value.split("-"))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}. Must be 1-12")
    if not 1 <= day <= 31:
        raise ValueError(f"Invalid day: {day}. Must be 1-31")
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ValueError(f"Invalid year: {year}. Must be {MIN_YEAR}-{MAX_YEAR}")
    try:
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError as e:
        raise ValueError(f"Invalid date: {value}") from e


def start_of_day_timestamp(value: str) -> int:
    """MM-DD-YYYY -> unix seconds at 00:00:00 UTC."""
    return int(_parse_day(value).timestamp())


def end_of_day_timestamp(value: str) -> int:
    """MM-DD-YYYY -> unix seconds at 23:59:59 UTC."""
    return int(_parse_day(value).timestamp()) + 86_399


def current_end_of_day_timestamp(now: datetime | None = None) -> int:
    """End of the current UTC day (23:59:59)."""
    now = now or datetime.now(timezone.utc)
    day = datetime(now.year, now.month, now.day, tzinfo=timezone.utc)
    return int(day.timestamp()) + 86_399


def format_timestamp(ts: int) -> str:
    """Unix seconds -> 'YYYY-MM-DD HH:MM:SS UTC'."""
    return datetime.fromtimestamp(int(ts), tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def format_day(ts: int) -> str:
    """Unix seconds -> 'YYYY-MM-DD'."""
    return datetime.fromtimestamp(int(ts), tz=timezone.utc).strftime("%Y-%m-%d")
