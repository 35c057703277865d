import asyncio
import threading
import unittest
from datetime import date

from moodcalendar.enums import MoodRating
from moodcalendar.exceptions.errors import StorageError, ValidationError
from moodcalendar.schemas.day_entry_schemas import DayEntry
from moodcalendar.services.calendar_cursor_store import CalendarCursorStore
from moodcalendar.services.calendar_session import CalendarSession
from moodcalendar.utils.calendar_dates import YearMonth
from tests.fakes import InMemoryDayEntryStorage

G, A, B = MoodRating.GOOD, MoodRating.AVERAGE, MoodRating.BAD

JANUARY = (date(2024, 1, 1), date(2024, 1, 31))


async def next_result(observer, timeout: float = 1.0):
    return await asyncio.wait_for(anext(observer), timeout)


async def settle(rounds: int = 10):
    for _ in range(rounds):
        await asyncio.sleep(0)


def dates(entries):
    return [e.date for e in entries]


class CursorStoreTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.storage = InMemoryDayEntryStorage()
        self.storage.entries = {
            date(2024, 1, 5): DayEntry(date=date(2024, 1, 5), morning_rating=G),
            date(2024, 2, 3): DayEntry(date=date(2024, 2, 3), evening_rating=B),
            date(2023, 12, 31): DayEntry(date=date(2023, 12, 31), happy_note="party"),
        }
        self.session = CalendarSession(today=date(2024, 1, 10))
        self.store = CalendarCursorStore(self.storage, self.session)


class TestCursors(CursorStoreTestCase):
    async def test_defaults_come_from_the_session(self) -> None:
        self.assertEqual(self.store.get_current_month(), YearMonth(2024, 1))
        self.assertEqual(self.store.get_current_year(), 2024)

    async def test_set_and_step_month(self) -> None:
        self.assertEqual(self.store.set_current_month(2024, 12), YearMonth(2024, 12))
        self.assertEqual(self.store.next_month(), YearMonth(2025, 1))
        self.assertEqual(self.store.previous_month(), YearMonth(2024, 12))
        self.assertEqual(self.session.current_month.value, YearMonth(2024, 12))

    async def test_invalid_cursor_values_raise_and_keep_the_cursor(self) -> None:
        for year, month in [(2024, 13), (2024, 0), (0, 1), (-5, 3)]:
            with self.assertRaises(ValidationError):
                self.store.set_current_month(year, month)
        with self.assertRaises(ValidationError):
            self.store.set_current_year(0)

        self.assertEqual(self.store.get_current_month(), YearMonth(2024, 1))
        self.assertEqual(self.store.get_current_year(), 2024)


class TestMonthObserver(CursorStoreTestCase):
    async def test_first_result_is_the_current_month(self) -> None:
        async with self.store.observe_entries_for_current_month() as observer:
            entries = await next_result(observer)
            self.assertEqual(dates(entries), [date(2024, 1, 5)])
            self.assertEqual(observer.current_range, JANUARY)

    async def test_save_inside_the_month_emits_again(self) -> None:
        async with self.store.observe_entries_for_current_month() as observer:
            await next_result(observer)
            await self.store.upsert_day_entry(date(2024, 1, 20), G, A, B, "sun", "rain")

            entries = await next_result(observer)
            self.assertEqual(dates(entries), [date(2024, 1, 5), date(2024, 1, 20)])
            self.assertEqual(entries[1].happy_note, "sun")

    async def test_save_outside_the_month_does_not_emit(self) -> None:
        async with self.store.observe_entries_for_current_month() as observer:
            await next_result(observer)
            await self.store.upsert_day_entry(date(2024, 2, 1), G, G, G)

            with self.assertRaises(asyncio.TimeoutError):
                await next_result(observer, timeout=0.05)

    async def test_month_boundaries_are_inclusive(self) -> None:
        self.store.set_current_month(2024, 2)
        await self.store.upsert_day_entry(date(2024, 2, 1), G, None, None)
        await self.store.upsert_day_entry(date(2024, 2, 29), B, None, None)
        await self.store.upsert_day_entry(date(2024, 3, 1), A, None, None)

        async with self.store.observe_entries_for_current_month() as observer:
            entries = await next_result(observer)
        self.assertEqual(dates(entries), [date(2024, 2, 1), date(2024, 2, 3), date(2024, 2, 29)])

    async def test_moving_the_cursor_emits_the_new_month(self) -> None:
        async with self.store.observe_entries_for_current_month() as observer:
            await next_result(observer)
            self.store.set_current_month(2024, 2)

            entries = await next_result(observer)
            self.assertEqual(dates(entries), [date(2024, 2, 3)])
            self.assertEqual(observer.cursor_value, YearMonth(2024, 2))

    async def test_cursor_moved_before_first_read_starts_on_latest_month(self) -> None:
        observer = self.store.observe_entries_for_current_month()
        self.store.set_current_month(2023, 12)
        entries = await next_result(observer)
        await observer.aclose()

        self.assertEqual(dates(entries), [date(2023, 12, 31)])
        self.assertNotIn(JANUARY, self.storage.range_fetches)

    async def test_slow_query_for_a_left_month_is_never_delivered(self) -> None:
        gate = self.storage.hold_range(*JANUARY)
        observer = self.store.observe_entries_for_current_month()
        reader = asyncio.create_task(anext(observer))

        while JANUARY not in self.storage.range_fetches:
            await asyncio.sleep(0)
        self.store.set_current_month(2024, 2)
        gate.set()

        entries = await asyncio.wait_for(reader, 1)
        self.assertEqual(dates(entries), [date(2024, 2, 3)])

        with self.assertRaises(asyncio.TimeoutError):
            await next_result(observer, timeout=0.05)
        await observer.aclose()

    async def test_queued_result_of_a_left_month_is_dropped(self) -> None:
        async with self.store.observe_entries_for_current_month() as observer:
            await next_result(observer)

            # January re-emits, but the cursor moves before anyone reads it
            await self.store.upsert_day_entry(date(2024, 1, 6), G, G, G)
            await settle()
            self.store.set_current_month(2024, 2)

            entries = await next_result(observer)
            self.assertEqual(dates(entries), [date(2024, 2, 3)])

    async def test_rapid_cursor_moves_deliver_only_the_last(self) -> None:
        async with self.store.observe_entries_for_current_month() as observer:
            await next_result(observer)
            self.store.set_current_month(2024, 2)
            self.store.set_current_month(2024, 3)
            self.store.set_current_month(2023, 12)

            entries = await next_result(observer)
            self.assertEqual(dates(entries), [date(2023, 12, 31)])
            with self.assertRaises(asyncio.TimeoutError):
                await next_result(observer, timeout=0.05)

    async def test_only_one_storage_subscription_per_observer(self) -> None:
        async with self.store.observe_entries_for_current_month() as observer:
            await next_result(observer)
            self.store.set_current_month(2024, 2)
            await next_result(observer)
            await settle()
            self.assertEqual(len(self.storage.live_queries), 1)

    async def test_two_observers_are_independent(self) -> None:
        first = self.store.observe_entries_for_current_month()
        second = self.store.observe_entries_for_current_month()
        self.assertEqual(dates(await next_result(first)), [date(2024, 1, 5)])
        self.assertEqual(dates(await next_result(second)), [date(2024, 1, 5)])

        await first.aclose()
        await self.store.upsert_day_entry(date(2024, 1, 7), A, A, A)
        self.assertEqual(len(await next_result(second)), 2)
        await second.aclose()


class TestYearObserver(CursorStoreTestCase):
    async def test_year_range_and_switch(self) -> None:
        async with self.store.observe_entries_for_current_year() as observer:
            entries = await next_result(observer)
            self.assertEqual(dates(entries), [date(2024, 1, 5), date(2024, 2, 3)])
            self.assertEqual(observer.current_range, (date(2024, 1, 1), date(2024, 12, 31)))

            self.store.set_current_year(2023)
            entries = await next_result(observer)
            self.assertEqual(dates(entries), [date(2023, 12, 31)])

    async def test_year_observer_ignores_month_cursor(self) -> None:
        async with self.store.observe_entries_for_current_year() as observer:
            await next_result(observer)
            self.store.set_current_month(2023, 12)
            with self.assertRaises(asyncio.TimeoutError):
                await next_result(observer, timeout=0.05)


class TestObserverLifecycle(CursorStoreTestCase):
    async def test_close_releases_everything(self) -> None:
        observer = self.store.observe_entries_for_current_month()
        await next_result(observer)
        (live,) = self.storage.live_queries
        await observer.aclose()
        await settle()

        self.assertTrue(observer.closed)
        self.assertTrue(live.closed)

        self.assertEqual(self.storage.live_queries, set())
        self.assertEqual(self.session.current_month.listener_count, 0)
        with self.assertRaises(StopAsyncIteration):
            await anext(observer)

    async def test_close_wakes_a_waiting_reader(self) -> None:
        observer = self.store.observe_entries_for_current_month()
        await next_result(observer)
        reader = asyncio.create_task(anext(observer))
        await settle()

        observer.close()
        with self.assertRaises(StopAsyncIteration):
            await asyncio.wait_for(reader, 1)

    async def test_no_results_after_close(self) -> None:
        observer = self.store.observe_entries_for_current_month()
        await next_result(observer)
        observer.close()
        await self.store.upsert_day_entry(date(2024, 1, 9), G, G, G)
        self.store.set_current_month(2024, 2)

        with self.assertRaises(StopAsyncIteration):
            await anext(observer)
        await observer.aclose()

    async def test_failed_first_query_surfaces_and_next_read_retries(self) -> None:
        self.storage.fail_range_fetches = True
        observer = self.store.observe_entries_for_current_month()
        with self.assertRaises(StorageError):
            await next_result(observer)

        self.storage.fail_range_fetches = False
        self.assertEqual(dates(await next_result(observer)), [date(2024, 1, 5)])
        await observer.aclose()

    async def test_unexpected_query_error_reaches_the_reader(self) -> None:
        async def undecodable(start, end):
            raise LookupError("'good' is not among the defined enum values")

        self.storage.fetch_range = undecodable
        observer = self.store.observe_entries_for_current_month()
        with self.assertRaises(StorageError) as ctx:
            await next_result(observer)
        self.assertIsInstance(ctx.exception.__cause__, LookupError)
        await observer.aclose()

    async def test_failed_refresh_keeps_the_last_result(self) -> None:
        async with self.store.observe_entries_for_current_month() as observer:
            await next_result(observer)
            self.storage.fail_range_fetches = True
            await self.store.upsert_day_entry(date(2024, 1, 8), G, G, G)

            with self.assertRaises(asyncio.TimeoutError):
                await next_result(observer, timeout=0.05)

            self.storage.fail_range_fetches = False
            await self.store.upsert_day_entry(date(2024, 1, 9), B, B, B)
            entries = await next_result(observer)
            self.assertEqual(dates(entries), [date(2024, 1, 5), date(2024, 1, 8), date(2024, 1, 9)])


class TestCursorFromAnotherThread(CursorStoreTestCase):
    def set_month_in_thread(self, year: int, month: int) -> list:
        errors = []

        def move():
            try:
                self.store.set_current_month(year, month)
            except Exception as e:
                errors.append(e)

        worker = threading.Thread(target=move)
        worker.start()
        worker.join()
        return errors

    async def test_month_set_from_a_worker_thread_switches_the_observer(self) -> None:
        async with self.store.observe_entries_for_current_month() as observer:
            await next_result(observer)

            self.assertEqual(self.set_month_in_thread(2024, 2), [])
            self.assertEqual(self.store.get_current_month(), YearMonth(2024, 2))

            entries = await next_result(observer)
            self.assertEqual(dates(entries), [date(2024, 2, 3)])
            self.assertEqual(observer.cursor_value, YearMonth(2024, 2))

    async def test_later_change_on_the_loop_wins_over_a_pending_thread_change(self) -> None:
        async with self.store.observe_entries_for_current_month() as observer:
            await next_result(observer)

            self.assertEqual(self.set_month_in_thread(2024, 2), [])
            self.store.set_current_month(2023, 12)

            entries = await next_result(observer)
            self.assertEqual(dates(entries), [date(2023, 12, 31)])
            with self.assertRaises(asyncio.TimeoutError):
                await next_result(observer, timeout=0.05)
            self.assertEqual(observer.cursor_value, YearMonth(2023, 12))


class TestUpsert(CursorStoreTestCase):
    async def test_round_trip(self) -> None:
        day = date(2024, 3, 14)
        await self.store.upsert_day_entry(day, G, B, A, "x", "y")

        entry = await self.store.get_day_entry(day)
        self.assertEqual(
            (entry.morning_rating, entry.afternoon_rating, entry.evening_rating, entry.happy_note, entry.sad_note),
            (G, B, A, "x", "y"),
        )

    async def test_same_save_twice_changes_nothing(self) -> None:
        day = date(2024, 3, 14)
        first = await self.store.upsert_day_entry(day, G, B, A, "x", "y")
        second = await self.store.upsert_day_entry(day, G, B, A, "x", "y")
        self.assertEqual(first, second)
        self.assertEqual(await self.store.get_day_entry(day), first)

    async def test_last_write_wins(self) -> None:
        day = date(2024, 3, 14)
        await self.store.upsert_day_entry(day, G, B, A, "x", "y")
        await self.store.upsert_day_entry(day, G, None, None, "", "")

        entry = await self.store.get_day_entry(day)
        self.assertEqual(entry.morning_rating, G)
        self.assertIsNone(entry.afternoon_rating)
        self.assertIsNone(entry.evening_rating)
        self.assertEqual(entry.happy_note, "")
        self.assertEqual(entry.sad_note, "")

    async def test_ratings_accept_persisted_literals(self) -> None:
        entry = await self.store.upsert_day_entry("2024-03-14", "GOOD", "AVERAGE", "BAD")
        self.assertEqual(entry.ratings, (G, A, B))

    async def test_bad_input_never_reaches_storage(self) -> None:
        with self.assertRaises(ValidationError):
            await self.store.upsert_day_entry("2023-02-29", G, G, G)
        with self.assertRaises(ValidationError):
            await self.store.upsert_day_entry(date(2024, 3, 1), "good", None, None)
        self.assertNotIn(date(2024, 3, 1), self.storage.entries)

    async def test_blank_save_for_unrecorded_day_creates_nothing(self) -> None:
        entry = await self.store.upsert_day_entry(date(2024, 3, 2))
        self.assertTrue(entry.is_blank())
        self.assertNotIn(date(2024, 3, 2), self.storage.entries)

    async def test_blank_save_for_recorded_day_clears_it(self) -> None:
        await self.store.upsert_day_entry(date(2024, 1, 5), None, None, None, None, None)
        self.assertTrue(self.storage.entries[date(2024, 1, 5)].is_blank())

    async def test_failed_save_raises_and_changes_nothing(self) -> None:
        async with self.store.observe_entries_for_current_month() as observer:
            before = await next_result(observer)
            self.storage.fail_upserts = True

            with self.assertRaises(StorageError):
                await self.store.upsert_day_entry(date(2024, 1, 5), B, B, B, "", "")

            self.assertEqual(self.storage.entries[date(2024, 1, 5)], before[0])
            with self.assertRaises(asyncio.TimeoutError):
                await next_result(observer, timeout=0.05)

    async def test_one_shot_range_reads(self) -> None:
        self.assertEqual(dates(await self.store.entries_for_month()), [date(2024, 1, 5)])
        self.assertEqual(dates(await self.store.entries_for_month(YearMonth(2023, 12))), [date(2023, 12, 31)])
        self.assertEqual(len(await self.store.entries_for_year()), 2)
        self.assertEqual(len(await self.store.entries_for_year(2023)), 1)

    async def test_search_notes_passes_through(self) -> None:
        async with self.store.search_notes("PART") as live:
            self.assertEqual(dates(await anext(live)), [date(2023, 12, 31)])


if __name__ == "__main__":
    unittest.main()
