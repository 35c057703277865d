"""
Day Entry Repository
Persists day entries and keeps live queries over them up to date.
"""

import asyncio
from datetime import date
from typing import Awaitable, Callable, List, Optional, Protocol, Set

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.future import select

from moodcalendar.database.connection import AsyncSessionLocal, async_session
from moodcalendar.exceptions.errors import StorageError
from moodcalendar.models.day_entry import DayEntryRecord
from moodcalendar.schemas.day_entry_schemas import DayEntry
from moodcalendar.core.logger import get_logger

logger = get_logger("day_entry_repository")

# Raised by the driver, by enum columns on unknown literals, or by snapshot validation
READ_ERRORS = (SQLAlchemyError, LookupError, SchemaValidationError)


class LiveQuery:
    """
    Async iterator over the successive results of one query.

    The first ``__anext__`` runs the query straight away. Later reads wait
    until the owner calls ``notify`` with a date the query watches, then run
    it again; several notifications before a read collapse into one re-run.

    A failing first run raises ``StorageError`` (the next read retries). A
    failing re-run is logged and skipped, so the consumer keeps the last good
    result. After ``close`` every read ends the iteration.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[List[DayEntry]]],
        watches: Callable[[date], bool],
        on_close: Callable[["LiveQuery"], None],
        description: str,
    ):
        self._fetch = fetch
        self._watches = watches
        self._on_close = on_close
        self.description = description
        self._dirty = asyncio.Event()
        self._dirty.set()
        self._closed = False
        self._emitted = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self):
        return self

    async def __anext__(self) -> List[DayEntry]:
        while True:
            if self._closed:
                raise StopAsyncIteration
            await self._dirty.wait()
            if self._closed:
                raise StopAsyncIteration
            self._dirty.clear()

            try:
                result = await self._fetch()
            except StorageError:
                if not self._emitted:
                    self._dirty.set()
                    raise
                logger.error(f"Refreshing {self.description} failed, keeping last result")
                continue

            if self._closed:
                raise StopAsyncIteration
            self._emitted = True
            return result

    def notify(self, day: date):
        if not self._closed and self._watches(day):
            self._dirty.set()

    def close(self):
        if self._closed:
            return
        self._closed = True
        # Wake a pending reader so it can finish
        self._dirty.set()
        self._on_close(self)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.close()


class DayEntryStorage(Protocol):
    """What the calendar store needs from persistence."""

    async def upsert(self, entry: DayEntry) -> DayEntry: ...

    async def get_by_date(self, day: date) -> Optional[DayEntry]: ...

    async def fetch_range(self, start: date, end: date) -> List[DayEntry]: ...

    def observe_range(self, start: date, end: date) -> LiveQuery: ...

    def search_notes(self, text: str) -> LiveQuery: ...


class DayEntryRepository:
    """SQLAlchemy-backed storage of day entries with in-process change feed."""

    def __init__(self, session_factory: async_sessionmaker = None):
        self._session_factory = session_factory or AsyncSessionLocal
        self._live_queries: Set[LiveQuery] = set()

    @property
    def live_query_count(self) -> int:
        return len(self._live_queries)

    async def upsert(self, entry: DayEntry) -> DayEntry:
        """Insert or fully replace the record for ``entry.date``."""
        try:
            async with async_session(self._session_factory) as db:
                record = await db.get(DayEntryRecord, entry.date)
                if record is None:
                    record = DayEntryRecord(date=entry.date)
                    db.add(record)

                record.morning_rating = entry.morning_rating
                record.afternoon_rating = entry.afternoon_rating
                record.evening_rating = entry.evening_rating
                record.happy_note = entry.happy_note
                record.sad_note = entry.sad_note

                await db.commit()
        except READ_ERRORS as e:
            logger.error(f"❌ Saving day entry {entry.date} failed: {e}")
            raise StorageError(f"Could not save the entry for {entry.date}", e)

        logger.info(f"Saved day entry {entry.date}")
        self._notify(entry.date)
        return entry

    async def get_by_date(self, day: date) -> Optional[DayEntry]:
        try:
            async with async_session(self._session_factory) as db:
                record = await db.get(DayEntryRecord, day)
                return DayEntry.model_validate(record) if record is not None else None
        except READ_ERRORS as e:
            logger.error(f"❌ Loading day entry {day} failed: {e}")
            raise StorageError(f"Could not load the entry for {day}", e)

    async def fetch_range(self, start: date, end: date) -> List[DayEntry]:
        """Entries with ``start <= date <= end``, oldest first."""
        stmt = (
            select(DayEntryRecord)
            .where(DayEntryRecord.date >= start)
            .where(DayEntryRecord.date <= end)
            .order_by(DayEntryRecord.date)
        )
        return await self._fetch_all(stmt, f"{start}..{end}")

    async def fetch_matching_notes(self, text: str) -> List[DayEntry]:
        stmt = (
            select(DayEntryRecord)
            .where(or_(
                DayEntryRecord.happy_note.icontains(text, autoescape=True),
                DayEntryRecord.sad_note.icontains(text, autoescape=True),
            ))
            .order_by(DayEntryRecord.date)
        )
        return await self._fetch_all(stmt, f"notes matching {text!r}")

    def observe_range(self, start: date, end: date) -> LiveQuery:
        return self._register(LiveQuery(
            fetch=lambda: self.fetch_range(start, end),
            watches=lambda day: start <= day <= end,
            on_close=self._unregister,
            description=f"range {start}..{end}",
        ))

    def search_notes(self, text: str) -> LiveQuery:
        # Any save can change whether a note matches
        return self._register(LiveQuery(
            fetch=lambda: self.fetch_matching_notes(text),
            watches=lambda day: True,
            on_close=self._unregister,
            description=f"search {text!r}",
        ))

    async def _fetch_all(self, stmt, what: str) -> List[DayEntry]:
        try:
            async with async_session(self._session_factory) as db:
                result = await db.execute(stmt)
                return [DayEntry.model_validate(r) for r in result.scalars().all()]
        except READ_ERRORS as e:
            logger.error(f"❌ Query for {what} failed: {e}")
            raise StorageError(f"Could not load entries for {what}", e)

    def _register(self, live: LiveQuery) -> LiveQuery:
        self._live_queries.add(live)
        logger.debug(f"Live query opened: {live.description}")
        return live

    def _unregister(self, live: LiveQuery):
        self._live_queries.discard(live)
        logger.debug(f"Live query closed: {live.description}")

    def _notify(self, day: date):
        for live in list(self._live_queries):
            live.notify(day)
