"""
Calendar date helpers: the YearMonth cursor value and inclusive date ranges.
"""

import calendar
import re
from datetime import date, datetime
from typing import NamedTuple, Tuple, Union

from moodcalendar.exceptions.errors import ValidationError

MIN_YEAR = 1
MAX_YEAR = 9999

_YEAR_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def validate_year(year) -> int:
    # bool is an int subclass; True is not a year
    if isinstance(year, bool) or not isinstance(year, int):
        raise ValidationError(f"Year must be an integer, got {year!r}")
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ValidationError(f"Year {year} is outside {MIN_YEAR}..{MAX_YEAR}")
    return year


def validate_month(month) -> int:
    if isinstance(month, bool) or not isinstance(month, int):
        raise ValidationError(f"Month must be an integer, got {month!r}")
    if not 1 <= month <= 12:
        raise ValidationError(f"Month {month} is outside 1..12")
    return month


class YearMonth(NamedTuple):
    """A calendar month, e.g. YearMonth(2024, 2)."""

    year: int
    month: int

    @classmethod
    def of(cls, year, month) -> "YearMonth":
        return cls(validate_year(year), validate_month(month))

    @classmethod
    def from_date(cls, value: date) -> "YearMonth":
        return cls(value.year, value.month)

    @classmethod
    def parse(cls, text: str) -> "YearMonth":
        match = _YEAR_MONTH_RE.match(text or "")
        if not match:
            raise ValidationError(f"Expected a month as YYYY-MM, got {text!r}")
        return cls.of(int(match.group(1)), int(match.group(2)))

    def length(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    def last_day(self) -> date:
        return date(self.year, self.month, self.length())

    def at_day(self, day: int) -> date:
        return date(self.year, self.month, day)

    def next(self) -> "YearMonth":
        if self.month == 12:
            return YearMonth.of(self.year + 1, 1)
        return YearMonth(self.year, self.month + 1)

    def previous(self) -> "YearMonth":
        if self.month == 1:
            return YearMonth.of(self.year - 1, 12)
        return YearMonth(self.year, self.month - 1)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def month_range(year: int, month: int) -> Tuple[date, date]:
    """Inclusive [first day, last day] of a month, leap years included."""
    ym = YearMonth.of(year, month)
    return ym.first_day(), ym.last_day()


def year_range(year: int) -> Tuple[date, date]:
    """Inclusive [Jan 1, Dec 31] of a year."""
    validate_year(year)
    return date(year, 1, 1), date(year, 12, 31)


def parse_entry_date(value: Union[date, str]) -> date:
    """Accept a date or an ISO ``YYYY-MM-DD`` string; reject impossible dates."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError(f"Not a valid calendar date: {value!r}")
    raise ValidationError(f"Not a valid calendar date: {value!r}")
