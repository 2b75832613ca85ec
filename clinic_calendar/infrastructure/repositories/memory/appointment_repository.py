"""
In-Memory Appointment Repository Module.

Keeps appointments in a dictionary. ``apply_plan`` works on a copy of the
store and swaps it in only when every write succeeded, so a rejected plan
leaves the store exactly as it was.
"""

import asyncio
import copy
import logging
from dataclasses import replace
from datetime import date, datetime
from uuid import UUID

from clinic_calendar.domain.entities.appointment import Appointment, AppointmentStatus
from clinic_calendar.domain.entities.series_plan import SeriesPlan
from clinic_calendar.domain.exceptions import ConcurrentSeriesModificationError
from clinic_calendar.domain.repositories.appointment_repository import IAppointmentRepository

logger = logging.getLogger(__name__)


class InMemoryAppointmentRepository(IAppointmentRepository):
    """In-memory implementation of the appointment repository."""

    def __init__(self, appointments: list[Appointment] | None = None):
        self._appointments: dict[UUID, Appointment] = {}
        self._lock = asyncio.Lock()
        for appointment in appointments or []:
            self._appointments[appointment.id] = copy.deepcopy(appointment)

    @property
    def appointments(self) -> list[Appointment]:
        """Snapshot of every stored appointment, ordered by start."""
        return sorted(
            (copy.deepcopy(a) for a in self._appointments.values()),
            key=lambda a: a.start_at,
        )

    async def get_by_id(self, appointment_id: UUID) -> Appointment | None:
        appointment = self._appointments.get(appointment_id)
        return copy.deepcopy(appointment) if appointment else None

    async def find_series(self, master_id: UUID) -> list[Appointment]:
        return [
            a
            for a in self.appointments
            if a.id == master_id or a.series_master_id == master_id
        ]

    async def count_for_clinician_on_date(self, clinician_id: UUID, day: date) -> int:
        return sum(
            1
            for a in self._appointments.values()
            if a.clinician_id == clinician_id
            and a.day == day
            and a.status != AppointmentStatus.CANCELLED
        )

    async def list_by_date_range(
        self,
        start: datetime,
        end: datetime,
        clinician_id: UUID | None = None,
    ) -> list[Appointment]:
        return [
            a
            for a in self.appointments
            if start <= a.start_at < end
            and (clinician_id is None or a.clinician_id == clinician_id)
        ]

    async def apply_plan(self, plan: SeriesPlan) -> SeriesPlan:
        async with self._lock:
            staged = dict(self._appointments)

            applied_updates = []
            for appointment in plan.updates:
                self._check_version(staged, appointment)
                stored = copy.deepcopy(appointment.copy_with(version=appointment.version + 1))
                staged[appointment.id] = stored
                applied_updates.append(copy.deepcopy(stored))

            for appointment in plan.deletes:
                self._check_version(staged, appointment)
                del staged[appointment.id]

            for appointment in plan.creates:
                if appointment.id in staged:
                    raise ConcurrentSeriesModificationError(str(appointment.id))
                staged[appointment.id] = copy.deepcopy(appointment)

            self._appointments = staged

        logger.debug(f"Applied plan: {plan.summary()}")
        return replace(plan, updates=tuple(applied_updates))

    @staticmethod
    def _check_version(staged: dict[UUID, Appointment], appointment: Appointment) -> None:
        current = staged.get(appointment.id)
        if current is None or current.version != appointment.version:
            raise ConcurrentSeriesModificationError(str(appointment.id))
