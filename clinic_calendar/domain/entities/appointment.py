"""
Appointment entity for managing clinic calendar entries.

An appointment is either standalone or a member of a recurring series. The
series master carries the recurrence rule; every other member points at the
master through ``series_master_id``.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from clinic_calendar.domain.entities.recurrence_rule import RecurrenceRule
from clinic_calendar.domain.exceptions import InvalidAppointmentTimeError

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class AppointmentStatus(str, Enum):
    """Lifecycle state of an appointment."""

    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class AppointmentType(str, Enum):
    """Whether the calendar entry is a client appointment or an internal event."""

    APPOINTMENT = "appointment"
    EVENT = "event"


# ---------------------------------------------------------------------------
# Domain entity
# ---------------------------------------------------------------------------


@dataclass
class Appointment:
    """Core domain model for a calendar appointment."""

    # ------------------------------------------------------------------
    # Required attributes
    # ------------------------------------------------------------------

    clinician_id: UUID
    start_at: datetime
    end_at: datetime

    # ------------------------------------------------------------------
    # Optional / defaulted attributes
    # ------------------------------------------------------------------

    id: UUID = field(default_factory=uuid4)
    title: str = ""
    appointment_type: AppointmentType = AppointmentType.APPOINTMENT
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    location_id: UUID | None = None
    client_group_id: UUID | None = None
    service_id: UUID | None = None
    created_by: UUID | None = None
    appointment_fee: Decimal | None = None
    notes: str | None = None
    is_all_day: bool = False

    # Series membership
    is_recurring: bool = False
    recurrence_rule: RecurrenceRule | None = None
    series_master_id: UUID | None = None

    # Optimistic concurrency token, bumped by the repository on every write
    version: int = 1

    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.end_at < self.start_at:
            raise InvalidAppointmentTimeError("Appointment end time must not be before start time.")

    # ------------------------------------------------------------------
    # Series helpers
    # ------------------------------------------------------------------

    @property
    def is_master(self) -> bool:
        return self.is_recurring and self.series_master_id is None

    @property
    def master_id(self) -> UUID | None:
        """Id of the series master this appointment belongs to, if any."""
        if not self.is_recurring:
            return None
        return self.series_master_id or self.id

    @property
    def duration(self) -> timedelta:
        return self.end_at - self.start_at

    @property
    def day(self) -> date:
        return self.start_at.date()

    def copy_with(self, **changes: Any) -> "Appointment":
        """Return a new appointment with ``changes`` applied; ``self`` is untouched."""
        return replace(self, **changes)

    def __str__(self) -> str:
        return f"Appointment(id={self.id}, clinician={self.clinician_id}, start={self.start_at})"
