"""
SQLAlchemy implementation of the appointment repository.

Reads open a short-lived session each. ``apply_plan`` runs every write of a
plan inside one transaction: updates first, then deletes (children before
masters), then inserts, so no row ever references a missing master.
"""

import logging
from dataclasses import replace
from datetime import date, datetime, time, timedelta
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from clinic_calendar.domain.entities.appointment import Appointment, AppointmentStatus
from clinic_calendar.domain.entities.series_plan import SeriesPlan
from clinic_calendar.domain.exceptions import (
    ConcurrentSeriesModificationError,
    PlanApplicationError,
    RepositoryError,
)
from clinic_calendar.domain.repositories.appointment_repository import IAppointmentRepository
from clinic_calendar.infrastructure.persistence.sqlalchemy.models.appointment import (
    AppointmentModel,
)

logger = logging.getLogger(__name__)


class SQLAlchemyAppointmentRepository(IAppointmentRepository):
    """Appointment repository backed by an async SQLAlchemy engine."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """
        Initialize the repository.

        Args:
            session_factory: Factory producing async sessions bound to the engine
        """
        self._session_factory = session_factory

    async def get_by_id(self, appointment_id: UUID) -> Appointment | None:
        try:
            async with self._session_factory() as session:
                model = await session.get(AppointmentModel, appointment_id)
                return model.to_domain() if model else None
        except SQLAlchemyError as e:
            logger.error(f"Error getting appointment {appointment_id}: {e}")
            raise RepositoryError(
                "Failed to get appointment",
                repository=type(self).__name__,
                operation="get_by_id",
                original_exception=e,
            ) from e

    async def find_series(self, master_id: UUID) -> list[Appointment]:
        try:
            async with self._session_factory() as session:
                query = (
                    select(AppointmentModel)
                    .where(
                        (AppointmentModel.id == master_id)
                        | (AppointmentModel.series_master_id == master_id)
                    )
                    .order_by(AppointmentModel.start_at)
                )
                result = await session.execute(query)
                return [model.to_domain() for model in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error loading series {master_id}: {e}")
            raise RepositoryError(
                "Failed to load series",
                repository=type(self).__name__,
                operation="find_series",
                original_exception=e,
            ) from e

    async def count_for_clinician_on_date(self, clinician_id: UUID, day: date) -> int:
        day_start = datetime.combine(day, time.min)
        try:
            async with self._session_factory() as session:
                query = select(func.count(AppointmentModel.id)).where(
                    AppointmentModel.clinician_id == clinician_id,
                    AppointmentModel.start_at >= day_start,
                    AppointmentModel.start_at < day_start + timedelta(days=1),
                    AppointmentModel.status != AppointmentStatus.CANCELLED,
                )
                result = await session.execute(query)
                return int(result.scalar_one())
        except SQLAlchemyError as e:
            logger.error(f"Error counting appointments for clinician {clinician_id}: {e}")
            raise RepositoryError(
                "Failed to count appointments",
                repository=type(self).__name__,
                operation="count_for_clinician_on_date",
                original_exception=e,
            ) from e

    async def list_by_date_range(
        self,
        start: datetime,
        end: datetime,
        clinician_id: UUID | None = None,
    ) -> list[Appointment]:
        try:
            async with self._session_factory() as session:
                query = select(AppointmentModel).where(
                    AppointmentModel.start_at >= start,
                    AppointmentModel.start_at < end,
                )
                if clinician_id is not None:
                    query = query.where(AppointmentModel.clinician_id == clinician_id)
                result = await session.execute(query.order_by(AppointmentModel.start_at))
                return [model.to_domain() for model in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing appointments: {e}")
            raise RepositoryError(
                "Failed to list appointments",
                repository=type(self).__name__,
                operation="list_by_date_range",
                original_exception=e,
            ) from e

    async def apply_plan(self, plan: SeriesPlan) -> SeriesPlan:
        """
        Apply ``plan`` in a single transaction.

        Raises:
            ConcurrentSeriesModificationError: If a planned row changed or vanished
            PlanApplicationError: If the database rejects any write
        """
        if plan.is_empty:
            return plan

        try:
            async with self._session_factory() as session, session.begin():
                for appointment in plan.updates:
                    values = AppointmentModel.column_values(appointment)
                    values.pop("id")
                    values["version"] = appointment.version + 1
                    result = await session.execute(
                        update(AppointmentModel)
                        .where(
                            AppointmentModel.id == appointment.id,
                            AppointmentModel.version == appointment.version,
                        )
                        .values(**values)
                    )
                    if result.rowcount != 1:
                        raise ConcurrentSeriesModificationError(str(appointment.id))

                # Children first: the master row is referenced by series_master_id.
                for appointment in sorted(plan.deletes, key=lambda a: a.is_master):
                    result = await session.execute(
                        delete(AppointmentModel).where(
                            AppointmentModel.id == appointment.id,
                            AppointmentModel.version == appointment.version,
                        )
                    )
                    if result.rowcount != 1:
                        raise ConcurrentSeriesModificationError(str(appointment.id))

                if plan.creates:
                    session.add_all([AppointmentModel.from_domain(a) for a in plan.creates])
                    await session.flush()
        except ConcurrentSeriesModificationError as e:
            logger.warning(f"Plan rejected, rolled back: {e}")
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error applying plan ({plan.summary()}): {e}")
            raise PlanApplicationError(original_exception=e) from e

        logger.debug(f"Applied plan: {plan.summary()}")
        return replace(
            plan,
            updates=tuple(a.copy_with(version=a.version + 1) for a in plan.updates),
        )
