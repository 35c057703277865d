"""
Calendar Routes
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from moodcalendar.api.v1.controllers.calendar_controller import CalendarController
from moodcalendar.exceptions.errors import StorageError
from moodcalendar.schemas.calendar_schemas import (
    MonthCursorRequest, YearCursorRequest,
    MonthEntriesResponse, YearEntriesResponse, MonthGrid, YearOverview
)
from moodcalendar.services.calendar_cursor_store import CalendarCursorStore
from moodcalendar.services.color_resolver import MoodColorResolver
from moodcalendar.utils.store_instance import get_store, get_resolver

router = APIRouter(prefix="/calendar", tags=["Calendar"])


def _sse(event: str, data: str) -> str:
    return f"event: {event}\ndata: {data}\n\n"


@router.get("/month", summary="Current Month Entries", response_model=MonthEntriesResponse)
async def get_month(store: CalendarCursorStore = Depends(get_store)):
    return await CalendarController.get_month(store)


@router.put("/month", summary="Move Month Cursor", response_model=MonthEntriesResponse)
async def set_month(payload: MonthCursorRequest, store: CalendarCursorStore = Depends(get_store)):
    return await CalendarController.set_month(store, payload.year, payload.month)


@router.post("/month/next", summary="Next Month", response_model=MonthEntriesResponse)
async def next_month(store: CalendarCursorStore = Depends(get_store)):
    return await CalendarController.step_month(store, forward=True)


@router.post("/month/previous", summary="Previous Month", response_model=MonthEntriesResponse)
async def previous_month(store: CalendarCursorStore = Depends(get_store)):
    return await CalendarController.step_month(store, forward=False)


@router.get("/month/grid", summary="Month Grid", response_model=MonthGrid)
async def get_month_grid(
    store: CalendarCursorStore = Depends(get_store),
    resolver: MoodColorResolver = Depends(get_resolver)
):
    return await CalendarController.get_month_grid(store, resolver)


@router.get("/month/stream", summary="Live Month Entries (server-sent events)")
async def stream_month(request: Request, store: CalendarCursorStore = Depends(get_store)):
    """
    Emits the month's entries now and again after every save in the month
    or move of the month cursor. Results for a month the cursor has left are
    never sent.
    """
    async def events():
        async with store.observe_entries_for_current_month() as observer:
            try:
                async for entries in observer:
                    if await request.is_disconnected():
                        break
                    payload = CalendarController.month_payload(observer.cursor_value, entries)
                    yield _sse("month", payload.model_dump_json())
            except StorageError as e:
                yield _sse("error", e.message)

    return StreamingResponse(events(), media_type="text/event-stream")


@router.get("/year", summary="Current Year Entries", response_model=YearEntriesResponse)
async def get_year(store: CalendarCursorStore = Depends(get_store)):
    return await CalendarController.get_year(store)


@router.put("/year", summary="Move Year Cursor", response_model=YearEntriesResponse)
async def set_year(payload: YearCursorRequest, store: CalendarCursorStore = Depends(get_store)):
    return await CalendarController.set_year(store, payload.year)


@router.get("/year/grid", summary="Year Pixel Overview", response_model=YearOverview)
async def get_year_overview(
    store: CalendarCursorStore = Depends(get_store),
    resolver: MoodColorResolver = Depends(get_resolver)
):
    return await CalendarController.get_year_overview(store, resolver)


@router.get("/year/stream", summary="Live Year Entries (server-sent events)")
async def stream_year(request: Request, store: CalendarCursorStore = Depends(get_store)):
    async def events():
        async with store.observe_entries_for_current_year() as observer:
            try:
                async for entries in observer:
                    if await request.is_disconnected():
                        break
                    payload = CalendarController.year_payload(observer.cursor_value, entries)
                    yield _sse("year", payload.model_dump_json())
            except StorageError as e:
                yield _sse("error", e.message)

    return StreamingResponse(events(), media_type="text/event-stream")
