"""
Appointment dependencies for API v1 routes.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from clinic_calendar.application.services.appointment_service import AppointmentService
from clinic_calendar.core.config.settings import Settings, get_settings
from clinic_calendar.domain.repositories.appointment_limit_repository import (
    IAppointmentLimitRepository,
)
from clinic_calendar.domain.repositories.appointment_repository import IAppointmentRepository
from clinic_calendar.infrastructure.persistence.sqlalchemy.repositories import (
    SQLAlchemyAppointmentLimitRepository,
    SQLAlchemyAppointmentRepository,
)
from clinic_calendar.presentation.api.dependencies.database import get_session_factory


def get_appointment_repository(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> IAppointmentRepository:
    return SQLAlchemyAppointmentRepository(session_factory)


def get_appointment_limit_repository(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> IAppointmentLimitRepository:
    return SQLAlchemyAppointmentLimitRepository(session_factory)


def get_appointment_service(
    appointment_repository: IAppointmentRepository = Depends(get_appointment_repository),
    limit_repository: IAppointmentLimitRepository = Depends(get_appointment_limit_repository),
    settings: Settings = Depends(get_settings),
) -> AppointmentService:
    """Build the appointment service with repositories and configured limits."""
    return AppointmentService(
        appointment_repository=appointment_repository,
        limit_repository=limit_repository,
        max_appointments_per_day=settings.MAX_APPOINTMENTS_PER_DAY,
        max_occurrences=settings.RECURRENCE_MAX_OCCURRENCES,
        horizon_days=settings.RECURRENCE_HORIZON_DAYS,
    )


AppointmentServiceDep = Annotated[AppointmentService, Depends(get_appointment_service)]
