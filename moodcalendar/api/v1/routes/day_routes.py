"""
Day Entry Routes
"""
from fastapi import APIRouter, Depends, Query

from moodcalendar.api.v1.controllers.day_controller import DayController
from moodcalendar.schemas.day_entry_schemas import (
    ColorSchema, DayEntryResponse, DayEntryUpsertRequest, SearchResponse
)
from moodcalendar.services.calendar_cursor_store import CalendarCursorStore
from moodcalendar.services.color_resolver import MoodColorResolver
from moodcalendar.utils.store_instance import get_store, get_resolver

router = APIRouter(tags=["Days"])


@router.get("/days/{day}", summary="Get Day Entry", response_model=DayEntryResponse)
async def get_day(
    day: str,
    store: CalendarCursorStore = Depends(get_store),
    resolver: MoodColorResolver = Depends(get_resolver)
):
    return await DayController.get_day(store, resolver, day)


@router.put("/days/{day}", summary="Save Day Entry", response_model=DayEntryResponse)
async def save_day(
    day: str,
    payload: DayEntryUpsertRequest,
    store: CalendarCursorStore = Depends(get_store),
    resolver: MoodColorResolver = Depends(get_resolver)
):
    """
    Replaces the whole entry for the day. Fields left out of the body are
    cleared, not kept from the previous save.
    """
    return await DayController.save_day(store, resolver, day, payload)


@router.get("/days/{day}/color", summary="Day Color", response_model=ColorSchema)
async def get_day_color(
    day: str,
    store: CalendarCursorStore = Depends(get_store),
    resolver: MoodColorResolver = Depends(get_resolver)
):
    return await DayController.get_day_color(store, resolver, day)


@router.get("/search", summary="Search Notes", response_model=SearchResponse)
async def search_notes(
    q: str = Query(..., min_length=1, max_length=200),
    store: CalendarCursorStore = Depends(get_store)
):
    return await DayController.search(store, q)
