"""
Integration test fixtures.

Integration tests run against a fresh in-memory SQLite database per test,
created through the same helpers the application lifespan uses.
"""

from collections.abc import AsyncGenerator

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from clinic_calendar.core.config.settings import Settings
from clinic_calendar.infrastructure.persistence.sqlalchemy.database import (
    create_engine,
    create_session_factory,
    create_tables,
)


@pytest_asyncio.fixture
async def db_engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    engine = create_engine(test_settings)
    await create_tables(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(db_engine)
