"""
Interface for the per-day appointment limit repository.
"""

from abc import ABC, abstractmethod
from datetime import date
from uuid import UUID

from clinic_calendar.domain.entities.appointment_limit import AppointmentLimit


class IAppointmentLimitRepository(ABC):
    """Stores per-clinician, per-date overrides of the daily cap."""

    @abstractmethod
    async def get_for_day(self, clinician_id: UUID, day: date) -> AppointmentLimit | None:
        """Return the override for the clinician and date, if one exists."""
        pass

    @abstractmethod
    async def upsert(self, limit: AppointmentLimit) -> AppointmentLimit:
        """Create or replace the override for ``limit.clinician_id`` on ``limit.day``."""
        pass
