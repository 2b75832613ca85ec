"""
SQLAlchemy database access module.

Builds the async engine and session factory from settings and creates the
schema. The application lifespan and the integration tests both go through
these helpers.
"""

import logging
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from clinic_calendar.core.config.settings import Settings
from clinic_calendar.infrastructure.persistence.sqlalchemy.models import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    """SQLite leaves foreign key enforcement off unless asked per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine described by ``settings``.

    In-memory SQLite databases share a single connection so every session
    sees the same schema and data. SQLite connections enforce foreign keys.
    """
    url = settings.ASYNC_DATABASE_URL
    engine_args: dict[str, Any] = {"echo": settings.DB_ECHO_LOG}

    if url.startswith("sqlite"):
        engine_args["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url:
            engine_args["poolclass"] = StaticPool
    else:
        engine_args.update(
            {
                "pool_pre_ping": True,
                "pool_size": 5,
                "max_overflow": 10,
                "pool_recycle": 300,
            }
        )

    logger.info(f"Creating AsyncEngine for {url}")
    engine = create_async_engine(url, **engine_args)
    if url.startswith("sqlite"):
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False, class_=AsyncSession)


async def create_tables(engine: AsyncEngine) -> None:
    """Create every table registered on ``Base.metadata`` if it does not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created (or verified to exist)")
