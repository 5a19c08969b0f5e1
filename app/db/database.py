# app/db/database.py (async)
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from app.core.config import settings
import logging
import time
from sqlalchemy import event

Base = declarative_base()


def get_async_database_url(database_url: str) -> str:
    """Convert DATABASE_URL to an async driver URL."""
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if database_url.startswith("sqlite://"):
        return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return database_url


def build_engine(database_url: str) -> AsyncEngine:
    url = get_async_database_url(database_url)
    if url.startswith("sqlite"):
        # SQLite has no server-side pool to tune
        return create_async_engine(url, future=True, echo=False)
    return create_async_engine(
        url,
        future=True,
        echo=False,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=settings.DB_POOL_PRE_PING,
    )


def setup_slow_query_logging(target: AsyncEngine) -> None:
    logger = logging.getLogger("sqlalchemy.slow")

    @event.listens_for(target.sync_engine, "before_cursor_execute")
    def before_cursor(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_start_time", []).append(time.time())

    @event.listens_for(target.sync_engine, "after_cursor_execute")
    def after_cursor(conn, cursor, statement, parameters, context, executemany):
        start_times = conn.info.get("query_start_time")
        if not start_times:
            return
        start_time = start_times.pop(-1)
        duration_ms = (time.time() - start_time) * 1000
        if duration_ms >= settings.SLOW_QUERY_THRESHOLD_MS:
            logger.warning(
                "Slow query detected",
                extra={
                    "duration_ms": duration_ms,
                    "statement": statement,
                },
            )


# Process-wide engine, built once at import and handed to sessions through get_db
engine = build_engine(settings.DATABASE_URL)
setup_slow_query_logging(engine)

AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_tables(target: AsyncEngine = engine) -> None:
    # Import models so they register on Base.metadata
    from app.db import models  # noqa: F401

    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db():
    async with AsyncSessionLocal() as session:
        yield session
