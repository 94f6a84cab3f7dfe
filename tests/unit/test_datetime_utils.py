"""
Unit tests for datetime helpers and clocks.
"""

from datetime import date, datetime, timezone

import pytest

from kpi_tracker.utils.datetime_utils import (
    FixedClock,
    SystemClock,
    days_between,
    parse_iso_datetime,
    start_of_day,
)


def test_fixed_clock():
    at = datetime(2024, 10, 8, 7, 0)
    assert FixedClock(at).now() == at


def test_system_clock_with_timezone_is_aware():
    assert SystemClock("UTC").now().tzinfo is not None
    assert SystemClock().now().tzinfo is None


def test_start_of_day_keeps_tzinfo():
    value = datetime(2024, 9, 15, 14, 30, tzinfo=timezone.utc)
    assert start_of_day(value) == datetime(2024, 9, 15, tzinfo=timezone.utc)
    assert start_of_day(date(2024, 9, 15)) == datetime(2024, 9, 15)


def test_days_between_ignores_time_of_day():
    assert days_between(datetime(2024, 9, 2, 23, 59), datetime(2024, 9, 3, 0, 1)) == 1
    assert days_between(date(2024, 9, 10), date(2024, 9, 3)) == -7


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("2024-10-08", datetime(2024, 10, 8)),
        ("2024-10-08T07:30:00", datetime(2024, 10, 8, 7, 30)),
        ("2024-10-08T07:30:00Z", datetime(2024, 10, 8, 7, 30, tzinfo=timezone.utc)),
    ],
)
def test_parse_iso_datetime(raw, expected):
    assert parse_iso_datetime(raw) == expected


def test_parse_iso_datetime_invalid():
    with pytest.raises(ValueError):
        parse_iso_datetime("yesterday")
