"""
Unit tests for conventions module.
"""

from datetime import date
import pytest

from ratetree.conventions import (
    DAYS_PER_YEAR,
    DayCount,
    days_to_years,
    year_fraction,
    years_to_days,
)


class TestDayCount:
    """Tests for day count conventions."""

    def test_act_360(self):
        """Test ACT/360 day count."""
        start = date(2024, 1, 15)
        end = date(2024, 4, 15)  # 91 days

        yf = year_fraction(start, end, DayCount.ACT_360)
        assert abs(yf - 91 / 360) < 1e-10

    def test_act_365(self):
        """Test ACT/365 day count."""
        start = date(2024, 1, 15)
        end = date(2024, 4, 15)  # 91 days

        yf = year_fraction(start, end, DayCount.ACT_365)
        assert abs(yf - 91 / 365) < 1e-10

    def test_act_act_across_leap_year(self):
        """ACT/ACT splits the period at the year boundary."""
        start = date(2024, 1, 15)
        end = date(2025, 1, 15)

        yf = year_fraction(start, end, DayCount.ACT_ACT)
        expected = 352 / 366 + 14 / 365
        assert abs(yf - expected) < 1e-14

    def test_act_act_same_year(self):
        yf = year_fraction(date(2023, 3, 1), date(2023, 4, 1), DayCount.ACT_ACT)
        assert abs(yf - 31 / 365) < 1e-15

    def test_thirty_360(self):
        """Test 30/360 day count."""
        start = date(2024, 1, 15)
        end = date(2024, 4, 15)  # 3 months

        yf = year_fraction(start, end, DayCount.THIRTY_360)
        assert abs(yf - 90 / 360) < 1e-10

    def test_year_fraction_same_date(self):
        """Test year fraction for same date returns 0."""
        d = date(2024, 1, 15)
        assert year_fraction(d, d, DayCount.ACT_360) == 0.0

    def test_from_string(self):
        assert DayCount.from_string("act/365") == DayCount.ACT_365
        assert DayCount.from_string("30/360") == DayCount.THIRTY_360
        with pytest.raises(ValueError):
            DayCount.from_string("BUS/252")


class TestDayOffsets:
    """Year fraction <-> calendar day offset conversion."""

    def test_default_basis(self):
        assert DAYS_PER_YEAR == 365.0
        assert years_to_days(0.5) == 182.5
        assert days_to_years(73.0) == 0.2

    def test_custom_basis(self):
        assert years_to_days(0.25, 360.0) == 90.0
        assert days_to_years(90.0, 360.0) == 0.25

    def test_tree_step_offsets(self):
        """Ten days split into steps maps back to whole days."""
        dt = 10 / 365 / 20
        assert abs(years_to_days(20 * dt) - 10.0) < 1e-12
