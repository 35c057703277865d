"""
Calendar Cursor Store
Maps the month and year cursors to live entry lists and saves day entries.
"""

import asyncio
from datetime import date
from typing import Callable, Generic, List, Optional, Set, Tuple, TypeVar, Union

from moodcalendar.enums import MoodRating
from moodcalendar.exceptions.errors import StorageError, ValidationError
from moodcalendar.schemas.day_entry_schemas import DayEntry
from moodcalendar.services.calendar_session import CalendarSession, ObservableValue
from moodcalendar.services.day_entry_repository import DayEntryStorage, LiveQuery
from moodcalendar.utils.calendar_dates import (
    YearMonth,
    month_range,
    parse_entry_date,
    validate_year,
    year_range,
)
from moodcalendar.core.logger import get_logger

logger = get_logger("calendar_cursor_store")

T = TypeVar("T")

RatingInput = Union[MoodRating, str, None]

# Queue marker telling a waiting reader that the observer was closed
_CLOSED = object()


class RangeObserver(Generic[T]):
    """
    Live entries for whatever range a cursor currently selects.

    Holds at most one storage subscription at a time. Every cursor change
    bumps a token, cancels the query task of the previous range, drops its
    queued results and starts a query for the new range tagged with the new
    token. Results carrying an old token are thrown away when read, so once
    the cursor has moved nothing from the previous range is delivered.

    The first read starts the subscription and binds the observer to the
    running event loop. Cursor changes made from any other thread are
    handed to that loop before anything is switched.
    """

    def __init__(
        self,
        cursor: ObservableValue[T],
        to_range: Callable[[T], Tuple[date, date]],
        storage: DayEntryStorage,
        name: str,
    ):
        self._cursor = cursor
        self._to_range = to_range
        self._storage = storage
        self._name = name

        self._token = 0
        self._queue: asyncio.Queue = asyncio.Queue()
        self._pump: Optional[asyncio.Task] = None
        self._retired: Set[asyncio.Task] = set()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._started = False
        self._closed = False

        self.cursor_value: T = cursor.value
        self.current_range: Tuple[date, date] = to_range(cursor.value)

        self._unsubscribe = cursor.subscribe(self._on_cursor_change)

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self):
        return self

    async def __anext__(self) -> List[DayEntry]:
        if self._closed:
            raise StopAsyncIteration
        if not self._started:
            self._loop = asyncio.get_running_loop()
            self._started = True
            self._switch_to(self._cursor.value)

        while True:
            token, entries, error = await self._queue.get()
            if token is _CLOSED or self._closed:
                raise StopAsyncIteration
            if token != self._token:
                continue
            if error is not None:
                # The failed subscription is gone; the next read starts over
                self._started = False
                raise error
            return entries

    def _on_cursor_change(self, value: T):
        if self._closed:
            return
        if not self._started:
            # Nothing subscribed yet; the first read picks up the latest value
            self.cursor_value = value
            self.current_range = self._to_range(value)
            return
        if not self._on_own_loop():
            self._loop.call_soon_threadsafe(self._switch_from_thread, value)
            return
        self._switch_to(value)

    def _on_own_loop(self) -> bool:
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False

    def _switch_from_thread(self, value: T):
        # Closed, or overtaken by a later change already applied on the loop
        if self._closed or not self._started or value != self._cursor.value:
            return
        self._switch_to(value)

    def _switch_to(self, value: T):
        self._token += 1
        token = self._token

        self._retire_pump()
        self._drain()

        start, end = self._to_range(value)
        self.cursor_value = value
        self.current_range = (start, end)
        logger.debug(f"{self._name} observer switched to {start}..{end} (token {token})")

        self._pump = self._loop.create_task(
            self._run(token, start, end),
            name=f"{self._name}-range-{token}",
        )

    async def _run(self, token: int, start: date, end: date):
        live: LiveQuery = self._storage.observe_range(start, end)
        try:
            async for entries in live:
                self._queue.put_nowait((token, entries, None))
        except StorageError as e:
            self._queue.put_nowait((token, None, e))
        except Exception as e:
            logger.error(f"{self._name} query for {start}..{end} failed: {e!r}")
            error = StorageError(f"Could not load entries for {start}..{end}", e)
            self._queue.put_nowait((token, None, error))
        finally:
            live.close()

    def _retire_pump(self):
        pump, self._pump = self._pump, None
        if pump is not None and not pump.done():
            pump.cancel()
            self._retired.add(pump)
            pump.add_done_callback(self._retired.discard)

    def _drain(self):
        while not self._queue.empty():
            self._queue.get_nowait()

    def close(self):
        """Stop observing. No result is delivered after this returns."""
        if self._closed:
            return
        self._closed = True
        self._unsubscribe()
        self._retire_pump()
        self._drain()
        self._queue.put_nowait((_CLOSED, None, None))
        logger.debug(f"{self._name} observer closed")

    async def aclose(self):
        """Close and wait for the cancelled query tasks to unwind."""
        self.close()
        for task in list(self._retired):
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()


def _coerce_rating(value: RatingInput) -> Optional[MoodRating]:
    if value is None or isinstance(value, MoodRating):
        return value
    try:
        return MoodRating(value)
    except ValueError:
        raise ValidationError(f"Unknown mood rating {value!r}; expected GOOD, AVERAGE or BAD")


class CalendarCursorStore:
    """
    The state layer behind the month grid and the year overview.

    Reads and writes go through the injected storage; cursor state lives in
    the ``CalendarSession`` passed in (or a fresh one defaulting to today).
    """

    def __init__(self, storage: DayEntryStorage, session: Optional[CalendarSession] = None):
        self.storage = storage
        self.session = session or CalendarSession()

    # --- MONTH CURSOR ---

    def get_current_month(self) -> YearMonth:
        return self.session.current_month.value

    def set_current_month(self, year: int, month: int) -> YearMonth:
        ym = YearMonth.of(year, month)
        self.session.current_month.set(ym)
        return ym

    def next_month(self) -> YearMonth:
        ym = self.get_current_month().next()
        self.session.current_month.set(ym)
        return ym

    def previous_month(self) -> YearMonth:
        ym = self.get_current_month().previous()
        self.session.current_month.set(ym)
        return ym

    def observe_entries_for_current_month(self) -> RangeObserver[YearMonth]:
        return RangeObserver(
            self.session.current_month,
            lambda ym: month_range(ym.year, ym.month),
            self.storage,
            name="month",
        )

    # --- YEAR CURSOR ---

    def get_current_year(self) -> int:
        return self.session.current_year.value

    def set_current_year(self, year: int) -> int:
        self.session.current_year.set(validate_year(year))
        return year

    def observe_entries_for_current_year(self) -> RangeObserver[int]:
        return RangeObserver(
            self.session.current_year,
            year_range,
            self.storage,
            name="year",
        )

    # --- ENTRIES ---

    async def upsert_day_entry(
        self,
        day: Union[date, str],
        morning: RatingInput = None,
        afternoon: RatingInput = None,
        evening: RatingInput = None,
        happy: Optional[str] = None,
        sad: Optional[str] = None,
    ) -> DayEntry:
        """
        Replace the whole entry for ``day``; nothing is merged with what was
        stored before. Raises ValidationError for bad input and StorageError
        when the write fails.
        """
        entry = DayEntry(
            date=parse_entry_date(day),
            morning_rating=_coerce_rating(morning),
            afternoon_rating=_coerce_rating(afternoon),
            evening_rating=_coerce_rating(evening),
            happy_note=happy,
            sad_note=sad,
        )

        if entry.is_blank() and await self.storage.get_by_date(entry.date) is None:
            # A blank save for a day without a record keeps it record-less
            logger.debug(f"Skipped blank entry for {entry.date}")
            return entry

        return await self.storage.upsert(entry)

    async def get_day_entry(self, day: Union[date, str]) -> Optional[DayEntry]:
        return await self.storage.get_by_date(parse_entry_date(day))

    async def entries_for_month(self, ym: Optional[YearMonth] = None) -> List[DayEntry]:
        ym = ym or self.get_current_month()
        return await self.storage.fetch_range(*month_range(ym.year, ym.month))

    async def entries_for_year(self, year: Optional[int] = None) -> List[DayEntry]:
        year = self.get_current_year() if year is None else year
        return await self.storage.fetch_range(*year_range(year))

    def search_notes(self, text: str) -> LiveQuery:
        return self.storage.search_notes(text)
