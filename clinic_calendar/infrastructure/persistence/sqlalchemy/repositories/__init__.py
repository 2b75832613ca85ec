"""SQLAlchemy repository implementations."""

from clinic_calendar.infrastructure.persistence.sqlalchemy.repositories.appointment_limit_repository import (
    SQLAlchemyAppointmentLimitRepository,
)
from clinic_calendar.infrastructure.persistence.sqlalchemy.repositories.appointment_repository import (
    SQLAlchemyAppointmentRepository,
)

__all__ = ["SQLAlchemyAppointmentLimitRepository", "SQLAlchemyAppointmentRepository"]
