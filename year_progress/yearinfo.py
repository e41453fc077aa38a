"""Calendar arithmetic for the year progress grid."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone

__all__ = [
    "DayYearInfo",
    "day_of_year",
    "days_in_year",
    "days_remaining",
    "format_year_progress",
    "is_leap_year",
    "year_fraction",
]


def is_leap_year(year: int) -> bool:
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


def _year_of(value: date | int) -> int:
    if isinstance(value, date):
        return value.year
    return int(value)


def days_in_year(value: date | int) -> int:
    """Return 366 for leap years and 365 otherwise.

    ``value`` may be a year number or any :class:`date` / :class:`datetime`.
    """

    return 366 if is_leap_year(_year_of(value)) else 365


def day_of_year(value: date) -> int:
    """Return the 1-based ordinal of ``value`` within its calendar year."""

    return value.timetuple().tm_yday


def days_remaining(value: date) -> int:
    return max(days_in_year(value) - day_of_year(value), 0)


@dataclass(frozen=True)
class DayYearInfo:
    day_of_year: int
    days_in_year: int
    days_remaining: int

    @classmethod
    def from_date(cls, value: date) -> "DayYearInfo":
        return cls(
            day_of_year=day_of_year(value),
            days_in_year=days_in_year(value),
            days_remaining=days_remaining(value),
        )

    def is_elapsed(self, day_index: int) -> bool:
        """Return True when the zero-based ``day_index`` is today or earlier."""

        return day_index + 1 <= self.day_of_year


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc)


def year_fraction(moment: datetime) -> float:
    """Return the share of the year elapsed at ``moment`` (0.0 up to 1.0).

    Year boundaries are local midnights in ``moment``'s own timezone, so a
    daylight saving shift shortens or lengthens the year as the wall clock sees it.
    """

    start = datetime(moment.year, 1, 1, tzinfo=moment.tzinfo)
    end = datetime(moment.year + 1, 1, 1, tzinfo=moment.tzinfo)
    total = (_as_utc(end) - _as_utc(start)).total_seconds()
    passed = (_as_utc(moment) - _as_utc(start)).total_seconds()
    return passed / total


def format_year_progress(moment: datetime) -> str:
    return f"{year_fraction(moment) * 100:.1f}%"
