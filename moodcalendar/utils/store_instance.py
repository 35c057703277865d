"""
Global Calendar Store Instance

One repository, one session and one store per process, shared by every route.
"""

from moodcalendar.core.config import settings
from moodcalendar.database.connection import init_models
from moodcalendar.services.calendar_cursor_store import CalendarCursorStore
from moodcalendar.services.calendar_session import CalendarSession
from moodcalendar.services.color_resolver import MoodColorResolver
from moodcalendar.services.day_entry_repository import DayEntryRepository
from moodcalendar.core.logger import get_logger

logger = get_logger("store_instance")

repository = DayEntryRepository()
store = CalendarCursorStore(repository, CalendarSession())
resolver = MoodColorResolver(settings.MOOD_BLEND_STRATEGY.strip().lower())


async def initialize_store():
    """Create the journal tables. Call once on startup."""
    await init_models()
    logger.info(
        f"✅ Calendar store ready at {store.get_current_month()} "
        f"with {resolver.strategy.value} color blending"
    )


def get_store() -> CalendarCursorStore:
    return store


def get_resolver() -> MoodColorResolver:
    return resolver
