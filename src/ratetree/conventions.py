"""
Day count and compounding conventions used by the curve and tree code.

Supported Day Counts:
- ACT/360: Actual days / 360
- ACT/365: Actual days / 365 (tree time grid, curve day offsets)
- ACT/ACT: Actual days / actual days in year
- 30/360: 30 days per month / 360

Tree time steps are year fractions; discount curves are queried by
calendar day offsets, converted with DAYS_PER_YEAR.
"""

from datetime import date
from enum import Enum
import calendar


DAYS_PER_YEAR = 365.0


class DayCount(Enum):
    """Day count convention enumeration."""
    ACT_360 = "ACT/360"
    ACT_365 = "ACT/365"
    ACT_ACT = "ACT/ACT"
    THIRTY_360 = "30/360"

    @classmethod
    def from_string(cls, s: str) -> "DayCount":
        """Parse day count from string representation."""
        mapping = {
            "ACT/360": cls.ACT_360,
            "ACT360": cls.ACT_360,
            "ACT/365": cls.ACT_365,
            "ACT365": cls.ACT_365,
            "ACT/ACT": cls.ACT_ACT,
            "ACTACT": cls.ACT_ACT,
            "30/360": cls.THIRTY_360,
            "30360": cls.THIRTY_360,
        }
        key = s.upper().replace(" ", "")
        if key in mapping:
            return mapping[key]
        raise ValueError(f"Unknown day count convention: {s}")


def year_fraction(start: date, end: date, day_count: DayCount) -> float:
    """
    Calculate year fraction between two dates using specified day count convention.

    Args:
        start: Start date
        end: End date
        day_count: Day count convention

    Returns:
        Year fraction as float (0.0 when end is not after start)
    """
    if start >= end:
        return 0.0

    actual_days = (end - start).days

    if day_count == DayCount.ACT_360:
        return actual_days / 360.0

    elif day_count == DayCount.ACT_365:
        return actual_days / DAYS_PER_YEAR

    elif day_count == DayCount.ACT_ACT:
        # ISDA ACT/ACT: split by year boundaries
        if start.year == end.year:
            days_in_year = 366 if calendar.isleap(start.year) else 365
            return actual_days / days_in_year
        total = 0.0
        for year in range(start.year, end.year + 1):
            period_start = start if year == start.year else date(year, 1, 1)
            period_end = end if year == end.year else date(year + 1, 1, 1)
            days_in_year = 366 if calendar.isleap(year) else 365
            total += (period_end - period_start).days / days_in_year
        return total

    elif day_count == DayCount.THIRTY_360:
        # 30/360 US convention
        d1 = min(start.day, 30)
        d2 = end.day if d1 < 30 else min(end.day, 30)
        return (360 * (end.year - start.year) + 30 * (end.month - start.month) + (d2 - d1)) / 360.0

    else:
        raise ValueError(f"Unknown day count: {day_count}")


def years_to_days(t: float, days_per_year: float = DAYS_PER_YEAR) -> float:
    """Convert a year fraction to a (fractional) calendar day offset."""
    return t * days_per_year


def days_to_years(days: float, days_per_year: float = DAYS_PER_YEAR) -> float:
    """Convert a calendar day offset to a year fraction."""
    return days / days_per_year


__all__ = [
    "DAYS_PER_YEAR",
    "DayCount",
    "year_fraction",
    "years_to_days",
    "days_to_years",
]
