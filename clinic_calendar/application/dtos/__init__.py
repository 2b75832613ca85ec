"""Data transfer objects."""

from clinic_calendar.application.dtos.appointment_dtos import (
    CreateAppointmentRequestDTO,
    DeleteAppointmentRequestDTO,
    UpdateAppointmentRequestDTO,
)

__all__ = [
    "CreateAppointmentRequestDTO",
    "DeleteAppointmentRequestDTO",
    "UpdateAppointmentRequestDTO",
]
