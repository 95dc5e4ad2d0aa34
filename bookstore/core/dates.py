"""Calendar-date helpers.

Promotion windows and report periods are plain calendar dates (no time of
day, no time zone). ``datetime.date`` is the value type used everywhere; this
module converts caller input into it and answers the few calendar questions
the services need.
"""
from datetime import date, datetime
from typing import Optional, Union
from zoneinfo import ZoneInfo

from bookstore.config import settings
from bookstore.core.exceptions import InvalidParameterError


DateInput = Union[date, str]


def is_leap_year(year: int) -> bool:
    """Gregorian leap-year rule."""
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


_DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


def days_in_month(month: int, year: int) -> int:
    """Number of calendar days in ``month`` of ``year``."""
    if not 1 <= month <= 12:
        raise InvalidParameterError(
            f"Tháng không hợp lệ: {month}",
            {"month": month},
        )
    if month == 2 and is_leap_year(year):
        return 29
    return _DAYS_IN_MONTH[month - 1]


def parse_calendar_date(value: DateInput, field: str = "date") -> date:
    """
    Convert a ``yyyy-mm-dd`` string (or a date) to ``date``.

    Timestamps like ``2024-03-01T17:00:00.000Z`` are cut to their first ten
    characters: the calendar day written by the client is kept as-is and is
    never shifted through UTC.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or len(value.strip()) < 10:
        raise InvalidParameterError(
            f"Ngày không hợp lệ: {value!r}",
            {"field": field, "value": value},
        )
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError as exc:
        raise InvalidParameterError(
            f"Ngày không hợp lệ: {value!r}",
            {"field": field, "value": value},
        ) from exc


def days_between_inclusive(start: DateInput, end: DateInput) -> int:
    """Days covered by ``[start, end]`` counting both ends (same day -> 1)."""
    start_date = parse_calendar_date(start, "start_date")
    end_date = parse_calendar_date(end, "end_date")
    return (end_date - start_date).days + 1


def store_today(tz_name: Optional[str] = None) -> date:
    """Today's calendar date in the store time zone."""
    return datetime.now(ZoneInfo(tz_name or settings.STORE_TIMEZONE)).date()


def store_now(tz_name: Optional[str] = None) -> datetime:
    """
    Current wall-clock time in the store time zone, without tzinfo.

    Sale timestamps use it: their day and month are the store calendar day.
    """
    return datetime.now(ZoneInfo(tz_name or settings.STORE_TIMEZONE)).replace(tzinfo=None)
