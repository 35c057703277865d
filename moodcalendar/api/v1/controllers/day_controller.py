"""
Day Entry Controller
"""
from moodcalendar.schemas.day_entry_schemas import (
    ColorSchema, DayEntry, DayEntryResponse, DayEntryUpsertRequest, SearchResponse
)
from moodcalendar.services.calendar_cursor_store import CalendarCursorStore
from moodcalendar.services.color_resolver import MoodColorResolver
from moodcalendar.utils.calendar_dates import parse_entry_date
from moodcalendar.core.logger import get_logger

logger = get_logger("day_controller")


class DayController:
    """Controller for reading, saving and searching day entries."""

    @staticmethod
    async def get_day(store: CalendarCursorStore, resolver: MoodColorResolver, day: str) -> DayEntryResponse:
        """A day without a record comes back as a blank entry, not a 404."""
        entry_date = parse_entry_date(day)
        entry = await store.get_day_entry(entry_date)
        return DayController._response(resolver, entry_date, entry)

    @staticmethod
    async def save_day(
        store: CalendarCursorStore,
        resolver: MoodColorResolver,
        day: str,
        payload: DayEntryUpsertRequest
    ) -> DayEntryResponse:
        entry_date = parse_entry_date(day)
        logger.info(f"Saving day {entry_date}")
        await store.upsert_day_entry(
            entry_date,
            payload.morning_rating,
            payload.afternoon_rating,
            payload.evening_rating,
            payload.happy_note,
            payload.sad_note,
        )
        entry = await store.get_day_entry(entry_date)
        return DayController._response(resolver, entry_date, entry)

    @staticmethod
    async def get_day_color(store: CalendarCursorStore, resolver: MoodColorResolver, day: str) -> ColorSchema:
        entry = await store.get_day_entry(parse_entry_date(day))
        return ColorSchema.model_validate(resolver.resolve_entry(entry))

    @staticmethod
    async def search(store: CalendarCursorStore, query: str) -> SearchResponse:
        async with store.search_notes(query) as live:
            results = await anext(live)
        return SearchResponse(query=query, results=results)

    @staticmethod
    def _response(resolver: MoodColorResolver, entry_date, entry) -> DayEntryResponse:
        return DayEntryResponse(
            entry=entry or DayEntry.blank(entry_date),
            exists=entry is not None,
            color=ColorSchema.model_validate(resolver.resolve_entry(entry)),
        )
