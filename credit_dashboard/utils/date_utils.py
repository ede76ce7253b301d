"""Date manipulation utilities"""

import calendar
from datetime import date, datetime
from typing import Optional


def last_day_of_month(year: int, month: int) -> int:
    """Number of days in the given month"""
    return calendar.monthrange(year, month)[1]


def clamped_date(year: int, month: int, day: int) -> date:
    """Build a date, clamping day to the last day of the month (Feb 31 -> Feb 28/29)"""
    return date(year, month, min(day, last_day_of_month(year, month)))


def add_months(year: int, month: int, months: int) -> tuple[int, int]:
    """Shift a (year, month) pair by a number of months"""
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def days_between(start: date, end: date) -> int:
    """Whole calendar days from start to end (negative if end is earlier)"""
    return (end - start).days


def parse_iso_date(value: date | datetime | str | None) -> Optional[date]:
    """
    Coerce an ISO date string (or date/datetime) to a date.

    Returns None for missing or unparseable input instead of raising.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value[:10])
    except (TypeError, ValueError):
        return None
