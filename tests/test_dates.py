from datetime import date, datetime

import pytest

from bookstore.core.dates import (
    days_between_inclusive,
    days_in_month,
    is_leap_year,
    parse_calendar_date,
    store_now,
    store_today,
)
from bookstore.core.exceptions import InvalidParameterError


@pytest.mark.parametrize("year, expected", [
    (2024, True),
    (2023, False),
    (2000, True),
    (1900, False),
    (2100, False),
])
def test_is_leap_year(year, expected):
    assert is_leap_year(year) is expected


def test_days_in_month_handles_february():
    assert days_in_month(2, 2024) == 29
    assert days_in_month(2, 2023) == 28
    assert days_in_month(2, 1900) == 28
    assert days_in_month(2, 2000) == 29


def test_days_in_month_long_and_short_months():
    assert days_in_month(1, 2023) == 31
    assert days_in_month(4, 2023) == 30
    assert days_in_month(12, 2023) == 31


@pytest.mark.parametrize("month", [0, 13, -1])
def test_days_in_month_rejects_bad_month(month):
    with pytest.raises(InvalidParameterError):
        days_in_month(month, 2024)


def test_parse_calendar_date_keeps_written_day():
    # A late-evening UTC timestamp is still the day the client wrote
    assert parse_calendar_date("2024-03-01T23:30:00.000Z") == date(2024, 3, 1)
    assert parse_calendar_date("2024-03-01") == date(2024, 3, 1)
    assert parse_calendar_date(date(2024, 3, 1)) == date(2024, 3, 1)
    assert parse_calendar_date(datetime(2024, 3, 1, 22, 0)) == date(2024, 3, 1)


@pytest.mark.parametrize("value", ["", "2024-3-1", "not a date", "2024-02-30", None, 20240301])
def test_parse_calendar_date_rejects_garbage(value):
    with pytest.raises(InvalidParameterError) as exc_info:
        parse_calendar_date(value, "start_date")
    assert exc_info.value.context["field"] == "start_date"


def test_days_between_inclusive():
    assert days_between_inclusive("2024-01-01", "2024-01-01") == 1
    assert days_between_inclusive("2024-01-01", "2024-01-30") == 30
    assert days_between_inclusive("2024-01-01", "2024-01-31") == 31
    assert days_between_inclusive("2024-02-28", "2024-03-01") == 3
    assert days_between_inclusive("2024-01-02", "2024-01-01") == 0


def test_store_today_uses_zone():
    assert isinstance(store_today(), date)
    assert isinstance(store_today("UTC"), date)


def test_store_now_is_store_wall_clock(frozen_clock):
    assert store_now() == datetime(2024, 3, 1, 6, 0)
    assert store_now().tzinfo is None
    assert store_now("UTC") == datetime(2024, 2, 29, 23, 0)
    assert store_today() == date(2024, 3, 1)
