"""
Calendar Controller
"""
from fastapi import HTTPException, status
from datetime import date
from typing import Optional

from moodcalendar.exceptions.errors import ApplicationException
from moodcalendar.schemas.calendar_schemas import (
    MonthEntriesResponse, YearEntriesResponse, MonthGrid, YearOverview
)
from moodcalendar.services.calendar_cursor_store import CalendarCursorStore
from moodcalendar.services.calendar_views import build_month_grid, build_year_overview
from moodcalendar.services.color_resolver import MoodColorResolver
from moodcalendar.utils.calendar_dates import YearMonth, month_range, year_range
from moodcalendar.core.logger import get_logger

logger = get_logger("calendar_controller")


class CalendarController:
    """Controller for the month and year cursors and their entries."""

    @staticmethod
    async def get_month(store: CalendarCursorStore) -> MonthEntriesResponse:
        try:
            ym = store.get_current_month()
            entries = await store.entries_for_month(ym)
            return CalendarController.month_payload(ym, entries)
        except ApplicationException:
            raise
        except Exception as e:
            logger.error(f"❌ Error getting month entries: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=str(e)
            )

    @staticmethod
    async def set_month(store: CalendarCursorStore, year: int, month: int) -> MonthEntriesResponse:
        store.set_current_month(year, month)
        return await CalendarController.get_month(store)

    @staticmethod
    async def step_month(store: CalendarCursorStore, forward: bool) -> MonthEntriesResponse:
        if forward:
            store.next_month()
        else:
            store.previous_month()
        return await CalendarController.get_month(store)

    @staticmethod
    async def get_month_grid(
        store: CalendarCursorStore,
        resolver: MoodColorResolver,
        today: Optional[date] = None
    ) -> MonthGrid:
        ym = store.get_current_month()
        entries = await store.entries_for_month(ym)
        return build_month_grid(ym, entries, resolver, today)

    @staticmethod
    async def get_year(store: CalendarCursorStore) -> YearEntriesResponse:
        try:
            year = store.get_current_year()
            entries = await store.entries_for_year(year)
            return CalendarController.year_payload(year, entries)
        except ApplicationException:
            raise
        except Exception as e:
            logger.error(f"❌ Error getting year entries: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=str(e)
            )

    @staticmethod
    async def set_year(store: CalendarCursorStore, year: int) -> YearEntriesResponse:
        store.set_current_year(year)
        return await CalendarController.get_year(store)

    @staticmethod
    async def get_year_overview(
        store: CalendarCursorStore,
        resolver: MoodColorResolver,
        today: Optional[date] = None
    ) -> YearOverview:
        year = store.get_current_year()
        entries = await store.entries_for_year(year)
        return build_year_overview(year, entries, resolver, today)

    @staticmethod
    def month_payload(ym: YearMonth, entries) -> MonthEntriesResponse:
        start, end = month_range(ym.year, ym.month)
        return MonthEntriesResponse(month=str(ym), start_date=start, end_date=end, entries=entries)

    @staticmethod
    def year_payload(year: int, entries) -> YearEntriesResponse:
        start, end = year_range(year)
        return YearEntriesResponse(year=year, start_date=start, end_date=end, entries=entries)
