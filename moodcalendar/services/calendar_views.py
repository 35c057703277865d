"""
Calendar Views
Cell data for the month grid and the yearly pixel overview. No layout here.
"""

from datetime import date
from typing import Dict, Iterable, Optional

from moodcalendar.schemas.calendar_schemas import DayCell, MonthGrid, YearOverview
from moodcalendar.schemas.day_entry_schemas import ColorSchema, DayEntry
from moodcalendar.services.color_resolver import MoodColorResolver
from moodcalendar.utils.calendar_dates import YearMonth, validate_year


def _by_date(entries: Iterable[DayEntry]) -> Dict[date, DayEntry]:
    return {e.date: e for e in entries}


def build_month_grid(
    ym: YearMonth,
    entries: Iterable[DayEntry],
    resolver: MoodColorResolver,
    today: Optional[date] = None,
) -> MonthGrid:
    """One cell per day of ``ym``; entries outside the month are ignored."""
    today = today or date.today()
    entries_by_date = _by_date(entries)

    days = []
    for day in range(1, ym.length() + 1):
        current = ym.at_day(day)
        entry = entries_by_date.get(current)
        color = resolver.resolve_entry(entry)
        days.append(DayCell(
            date=current,
            day=day,
            color=ColorSchema.model_validate(color),
            is_today=current == today,
            entry=entry,
        ))

    return MonthGrid(
        month=str(ym),
        # Monday = 0 blanks, Sunday = 6
        leading_blanks=ym.first_day().isoweekday() - 1,
        days=days,
    )


def build_year_overview(
    year: int,
    entries: Iterable[DayEntry],
    resolver: MoodColorResolver,
    today: Optional[date] = None,
) -> YearOverview:
    validate_year(year)
    entries = list(entries)
    return YearOverview(
        year=year,
        months=[
            build_month_grid(YearMonth(year, month), entries, resolver, today)
            for month in range(1, 13)
        ],
    )
