"""
Interface for the Appointment Repository.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from uuid import UUID

from clinic_calendar.domain.entities.appointment import Appointment
from clinic_calendar.domain.entities.series_plan import SeriesPlan


class IAppointmentRepository(ABC):
    """Abstract base class defining the appointment repository interface."""

    @abstractmethod
    async def get_by_id(self, appointment_id: UUID) -> Appointment | None:
        """Retrieve an appointment by its ID."""
        pass

    @abstractmethod
    async def find_series(self, master_id: UUID) -> list[Appointment]:
        """Return the master and every child of a series, ordered by start time."""
        pass

    @abstractmethod
    async def count_for_clinician_on_date(self, clinician_id: UUID, day: date) -> int:
        """Count the clinician's non-cancelled appointments starting on ``day``."""
        pass

    @abstractmethod
    async def list_by_date_range(
        self,
        start: datetime,
        end: datetime,
        clinician_id: UUID | None = None,
    ) -> list[Appointment]:
        """List appointments starting in ``[start, end)``, optionally for one clinician."""
        pass

    @abstractmethod
    async def apply_plan(self, plan: SeriesPlan) -> SeriesPlan:
        """
        Apply every write of ``plan`` atomically.

        Implementations either persist the whole plan or nothing. Each update
        and delete must match the stored ``version``; a mismatch aborts the plan.

        Returns:
            The applied plan, with updated rows carrying their new version

        Raises:
            ConcurrentSeriesModificationError: If a planned row changed or vanished
            PlanApplicationError: If the storage layer fails
        """
        pass


# Alias used by services and dependency providers
AppointmentRepository = IAppointmentRepository
