"""
In-Memory Appointment Limit Repository Module.
"""

import copy
from datetime import date
from uuid import UUID

from clinic_calendar.domain.entities.appointment_limit import AppointmentLimit
from clinic_calendar.domain.repositories.appointment_limit_repository import (
    IAppointmentLimitRepository,
)


class InMemoryAppointmentLimitRepository(IAppointmentLimitRepository):
    """Keeps limit overrides keyed by clinician and day."""

    def __init__(self) -> None:
        self._limits: dict[tuple[UUID, date], AppointmentLimit] = {}

    async def get_for_day(self, clinician_id: UUID, day: date) -> AppointmentLimit | None:
        limit = self._limits.get((clinician_id, day))
        return copy.copy(limit) if limit else None

    async def upsert(self, limit: AppointmentLimit) -> AppointmentLimit:
        existing = self._limits.get((limit.clinician_id, limit.day))
        stored = copy.copy(limit)
        if existing is not None:
            stored.id = existing.id
        self._limits[(limit.clinician_id, limit.day)] = stored
        return copy.copy(stored)
