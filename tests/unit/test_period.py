"""
Unit tests for the Period value object.
"""

from datetime import date, datetime

import pytest

from kpi_tracker.core.exceptions import InvalidPeriodFormat, ValidationError
from kpi_tracker.models.enums import KpiInterval
from kpi_tracker.models.kpi import KPIValue
from kpi_tracker.models.period import Period


class TestPeriodParsing:
    """Tests for construction and validation."""

    @pytest.mark.parametrize(
        "raw,interval",
        [
            ("2024-09", KpiInterval.MONTHLY),
            ("2024-W36", KpiInterval.WEEKLY),
            ("2024-Q3", KpiInterval.QUARTERLY),
        ],
    )
    def test_valid_formats(self, raw, interval):
        period = Period(raw)
        assert period.value == raw
        assert period.interval is interval

    def test_single_digit_month_is_normalized(self):
        assert Period("2024-9").value == "2024-09"
        assert Period("2024-9") == Period("2024-09")

    def test_single_digit_week_is_normalized(self):
        assert Period("2024-W5").value == "2024-W05"

    @pytest.mark.parametrize("raw", ["2024-13", "2024-00"])
    def test_month_out_of_range(self, raw):
        with pytest.raises(InvalidPeriodFormat, match="Monat"):
            Period(raw)

    @pytest.mark.parametrize("raw", ["2024-W00", "2024-W54"])
    def test_week_out_of_range(self, raw):
        with pytest.raises(InvalidPeriodFormat, match="Woche"):
            Period(raw)

    @pytest.mark.parametrize("raw", ["2024-Q0", "2024-Q5"])
    def test_quarter_out_of_range(self, raw):
        with pytest.raises(InvalidPeriodFormat, match="Quartal"):
            Period(raw)

    @pytest.mark.parametrize(
        "raw", ["", "2024", "24-09", "2024-09-01", "2024/09", "2024-w36", "2024-09\n", " 2024-09"]
    )
    def test_malformed(self, raw):
        with pytest.raises(InvalidPeriodFormat, match="YYYY-MM"):
            Period(raw)

    def test_error_is_also_value_and_validation_error(self):
        with pytest.raises(ValueError):
            Period("nope")
        with pytest.raises(ValidationError):
            Period("nope")

    def test_invalid_period_inside_model_is_a_field_error(self):
        from pydantic import ValidationError as PydanticValidationError

        with pytest.raises(PydanticValidationError):
            KPIValue(period="2024-13", value="1")


class TestPeriodFromDate:
    """Tests for Period.from_date."""

    def test_monthly(self):
        assert Period.from_date(date(2024, 9, 15), KpiInterval.MONTHLY).value == "2024-09"

    def test_weekly_uses_iso_week(self):
        assert Period.from_date(date(2024, 9, 2), KpiInterval.WEEKLY).value == "2024-W36"

    def test_weekly_at_year_boundary_uses_iso_year(self):
        # Monday 2024-12-30 belongs to ISO week 1 of 2025
        assert Period.from_date(date(2024, 12, 30), KpiInterval.WEEKLY).value == "2025-W01"
        # Friday 2021-01-01 belongs to ISO week 53 of 2020
        assert Period.from_date(date(2021, 1, 1), KpiInterval.WEEKLY).value == "2020-W53"

    @pytest.mark.parametrize(
        "month,quarter",
        [(1, 1), (3, 1), (4, 2), (6, 2), (7, 3), (9, 3), (10, 4), (12, 4)],
    )
    def test_quarterly(self, month, quarter):
        period = Period.from_date(date(2024, month, 1), KpiInterval.QUARTERLY)
        assert period.value == f"2024-Q{quarter}"

    def test_accepts_datetime(self):
        period = Period.from_date(datetime(2024, 9, 15, 23, 59), KpiInterval.MONTHLY)
        assert period.value == "2024-09"

    def test_from_date_round_trips_through_parser(self):
        for interval in KpiInterval:
            period = Period.from_date(date(2024, 5, 20), interval)
            assert Period.from_string(period.value) == period

    def test_current_uses_given_now(self):
        assert Period.current(KpiInterval.QUARTERLY, datetime(2024, 11, 3)).value == "2024-Q4"


class TestPeriodEquality:
    """Tests for equality semantics."""

    def test_equals(self):
        assert Period("2024-09").equals(Period("2024-09"))
        assert not Period("2024-09").equals(Period("2024-10"))

    def test_different_cadences_never_equal(self):
        assert Period("2024-01") != Period("2024-Q1")
        assert Period("2024-W01") != Period("2024-01")

    def test_hashable(self):
        assert len({Period("2024-9"), Period("2024-09")}) == 1


class TestPeriodNavigation:
    """Tests for start/end dates and stepping."""

    def test_month_boundaries(self):
        period = Period("2024-02")
        assert period.start_date() == date(2024, 2, 1)
        assert period.end_date() == date(2024, 2, 29)

    def test_week_boundaries(self):
        period = Period("2024-W36")
        assert period.start_date() == date(2024, 9, 2)
        assert period.end_date() == date(2024, 9, 8)

    def test_quarter_boundaries(self):
        period = Period("2024-Q4")
        assert period.start_date() == date(2024, 10, 1)
        assert period.end_date() == date(2024, 12, 31)

    def test_next_and_previous_wrap_years(self):
        assert Period("2024-12").next().value == "2025-01"
        assert Period("2025-01").previous().value == "2024-12"
        assert Period("2024-Q4").next().value == "2025-Q1"
        assert Period("2025-Q1").previous().value == "2024-Q4"

    def test_weekly_next_crosses_53_week_year(self):
        assert Period("2020-W52").next().value == "2020-W53"
        assert Period("2020-W53").next().value == "2021-W01"
        assert Period("2021-W01").previous().value == "2020-W53"

    @pytest.mark.parametrize("raw", ["2024-W53", "2025-W53", "2019-W53"])
    def test_week_53_rejected_in_52_week_year(self, raw):
        with pytest.raises(InvalidPeriodFormat, match="keine KW 53"):
            Period(raw)

    def test_52_week_year_goes_straight_to_next_year(self):
        assert Period("2024-W52").next().value == "2025-W01"
        assert Period("2025-W01").previous().value == "2024-W52"
        assert Period("2024-W52").end_date() == date(2024, 12, 29)

    @pytest.mark.parametrize("raw", ["2015-W53", "2020-W53", "2026-W53"])
    def test_week_53_accepted_in_53_week_year(self, raw):
        period = Period(raw)
        assert period.number == 53
        assert Period.from_date(period.start_date(), KpiInterval.WEEKLY) == period


class TestPeriodFormat:
    """Tests for German display formatting."""

    def test_month(self):
        assert Period("2024-03").format() == "März 2024"

    def test_week(self):
        assert Period("2024-W05").format() == "KW 5/2024"

    def test_quarter(self):
        assert Period("2024-Q1").format() == "Q1 2024"

    def test_str_is_canonical(self):
        assert str(Period("2024-9")) == "2024-09"
