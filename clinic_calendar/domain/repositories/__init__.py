"""Repository interfaces."""

from clinic_calendar.domain.repositories.appointment_limit_repository import (
    IAppointmentLimitRepository,
)
from clinic_calendar.domain.repositories.appointment_repository import (
    AppointmentRepository,
    IAppointmentRepository,
)

__all__ = [
    "AppointmentRepository",
    "IAppointmentLimitRepository",
    "IAppointmentRepository",
]
