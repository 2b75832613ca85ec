"""
Database dependencies for API routes.

The application lifespan stores the session factory on ``app.state``; these
dependencies hand it to repository providers.
"""

import logging

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = logging.getLogger(__name__)


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    """
    Return the session factory created by the application lifespan.

    Raises:
        RuntimeError: If the database has not been initialized
    """
    factory = getattr(request.app.state, "session_factory", None)
    if factory is None:
        logger.error("Database session factory not found on app.state")
        raise RuntimeError("Database not initialized. Session factory missing from app state.")
    return factory
