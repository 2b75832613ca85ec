"""
SQLAlchemy implementation of the appointment limit repository.
"""

import logging
from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from clinic_calendar.domain.entities.appointment_limit import AppointmentLimit
from clinic_calendar.domain.exceptions import RepositoryError
from clinic_calendar.domain.repositories.appointment_limit_repository import (
    IAppointmentLimitRepository,
)
from clinic_calendar.infrastructure.persistence.sqlalchemy.models.appointment_limit import (
    AppointmentLimitModel,
)

logger = logging.getLogger(__name__)


class SQLAlchemyAppointmentLimitRepository(IAppointmentLimitRepository):
    """Per-day limit overrides stored in the 'appointment_limits' table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_for_day(self, clinician_id: UUID, day: date) -> AppointmentLimit | None:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(AppointmentLimitModel).where(
                        AppointmentLimitModel.clinician_id == clinician_id,
                        AppointmentLimitModel.day == day,
                    )
                )
                model = result.scalars().first()
                return model.to_domain() if model else None
        except SQLAlchemyError as e:
            logger.error(f"Error getting limit for clinician {clinician_id} on {day}: {e}")
            raise RepositoryError(
                "Failed to get appointment limit",
                repository=type(self).__name__,
                operation="get_for_day",
                original_exception=e,
            ) from e

    async def upsert(self, limit: AppointmentLimit) -> AppointmentLimit:
        try:
            async with self._session_factory() as session, session.begin():
                result = await session.execute(
                    select(AppointmentLimitModel).where(
                        AppointmentLimitModel.clinician_id == limit.clinician_id,
                        AppointmentLimitModel.day == limit.day,
                    )
                )
                model = result.scalars().first()
                if model is None:
                    model = AppointmentLimitModel.from_domain(limit)
                    session.add(model)
                else:
                    model.max_limit = limit.max_limit
                await session.flush()
                return model.to_domain()
        except SQLAlchemyError as e:
            logger.error(f"Error saving limit for clinician {limit.clinician_id}: {e}")
            raise RepositoryError(
                "Failed to save appointment limit",
                repository=type(self).__name__,
                operation="upsert",
                original_exception=e,
            ) from e
