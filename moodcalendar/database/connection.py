from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import AsyncAdaptedQueuePool, StaticPool
from contextlib import asynccontextmanager
from moodcalendar.core.config import settings
from moodcalendar.core.logger import get_logger

logger = get_logger("database")


def build_engine(database_url: str = None, echo: bool = None) -> AsyncEngine:
    """Create the async engine for the journal database."""
    url = database_url or settings.DATABASE_URL
    if echo is None:
        echo = settings.SQL_ECHO

    if url.startswith("sqlite"):
        # In-memory SQLite lives in a single connection; share it across sessions
        if ":memory:" in url or url.rstrip("/").endswith("aiosqlite:"):
            return create_async_engine(url, echo=echo, poolclass=StaticPool)
        return create_async_engine(url, echo=echo)

    return create_async_engine(
        url,
        echo=echo,
        poolclass=AsyncAdaptedQueuePool,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,
        pool_pre_ping=True,
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = build_engine()
AsyncSessionLocal = build_session_factory(engine)


async def init_models(bind: AsyncEngine = None):
    """Create tables that do not exist yet."""
    from moodcalendar.database.base import Base
    import moodcalendar.models  # noqa: F401  registers the tables

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Journal database tables ensured.")


@asynccontextmanager
async def async_session(session_factory: async_sessionmaker = None):
    """Context manager for database session."""
    async with (session_factory or AsyncSessionLocal)() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
