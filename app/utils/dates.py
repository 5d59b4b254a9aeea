# app/utils/dates.py
"""
Whole-day date helpers.
Every resolver compares calendar dates, never timestamps, so intraday times
and timezone offsets cannot shift a record onto the neighbouring day.
"""

import calendar
from datetime import date, datetime, timedelta
from typing import Iterator, Optional, Union

from app.exceptions import ValidationError

DateLike = Union[date, datetime, str]


def to_day(value: DateLike) -> date:
    """Strip time-of-day. Accepts date, datetime or an ISO 'YYYY-MM-DD[...]' string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            raise ValidationError(f"'{value}' is not a YYYY-MM-DD date")
    raise ValidationError(f"Cannot convert {type(value).__name__} to a date")


def optional_day(value: Optional[DateLike]) -> Optional[date]:
    return to_day(value) if value is not None else None


def day_key(value: DateLike) -> str:
    """'YYYY-MM-DD' key used by specific-date limits."""
    return to_day(value).isoformat()


def weekday_index(day: date) -> int:
    """Weekday with Sunday = 0 ... Saturday = 6 (the quota tables' convention)."""
    return (day.weekday() + 1) % 7


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every day from start to end, both inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def add_months(day: date, months: int) -> date:
    """Calendar month arithmetic; the day is clamped to the target month's length."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last))


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def month_grid(year: int, month: int) -> list[date]:
    """
    All days a month calendar renders: full Sunday-first weeks, including
    leading days of the previous month and trailing days of the next.
    """
    first, last = month_bounds(year, month)
    grid_start = first - timedelta(days=weekday_index(first))
    grid_end = last + timedelta(days=6 - weekday_index(last))
    return list(iter_days(grid_start, grid_end))
