"""
Exception classes related to appointment operations.

This module defines exceptions raised during appointment creation, series
lookups, and daily limit enforcement.
"""

from datetime import date

from clinic_calendar.domain.exceptions.base_exceptions import BaseApplicationError


class AppointmentError(BaseApplicationError):
    """Base class for appointment-related exceptions."""

    def __init__(self, message: str = "Appointment operation failed") -> None:
        super().__init__(message)


class InvalidAppointmentTimeError(AppointmentError):
    """Raised when an invalid appointment time is specified."""

    def __init__(self, message: str = "Invalid appointment time") -> None:
        super().__init__(message)


class LimitExceededError(AppointmentError):
    """Raised when a clinician's daily appointment limit would be exceeded."""

    def __init__(
        self,
        day: date,
        clinician_id: str | None = None,
        limit: int | None = None,
        message: str | None = None,
    ) -> None:
        if message is None:
            message = f"Appointment limit reached for {day.isoformat()}"
            if limit is not None:
                message = f"{message} (maximum {limit} per day)"
        super().__init__(message)
        self.day = day
        self.clinician_id = clinician_id
        self.limit = limit


class OccurrenceNotFoundError(AppointmentError):
    """Raised when the targeted appointment occurrence does not exist."""

    def __init__(
        self,
        appointment_id: str | None = None,
        message: str = "Appointment not found",
    ) -> None:
        if appointment_id:
            message = f"Appointment with ID {appointment_id} not found"
        super().__init__(message)
        self.appointment_id = appointment_id


class SeriesNotFoundError(AppointmentError):
    """Raised when a recurring series cannot be loaded or has no master."""

    def __init__(
        self,
        master_id: str | None = None,
        message: str = "Recurring series not found",
    ) -> None:
        if master_id:
            message = f"Recurring series with master ID {master_id} not found"
        super().__init__(message)
        self.master_id = master_id
