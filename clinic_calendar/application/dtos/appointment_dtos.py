"""
Appointment request DTOs.

One DTO per scheduling operation. Required and optional fields are encoded
in the models themselves, so a request that reaches the service is already
structurally valid.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, model_validator

from clinic_calendar.domain.entities.appointment import (
    Appointment,
    AppointmentStatus,
    AppointmentType,
)
from clinic_calendar.domain.entities.appointment_changes import AppointmentChanges
from clinic_calendar.domain.entities.recurrence_rule import RecurrenceRule
from clinic_calendar.domain.entities.series_plan import MutationScope


class CreateAppointmentRequestDTO(BaseModel):
    """DTO representing a request to create an appointment or a recurring series."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    clinician_id: UUID
    start_at: datetime
    end_at: datetime
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
    is_recurring: bool = False
    recurrence_rule: RecurrenceRule | None = None

    @model_validator(mode="after")
    def validate_window_and_recurrence(self) -> "CreateAppointmentRequestDTO":
        if self.end_at < self.start_at:
            raise ValueError("end_at must not be before start_at")
        if self.is_recurring and self.recurrence_rule is None:
            raise ValueError("A recurring appointment needs a recurrence rule")
        if self.recurrence_rule is not None and not self.is_recurring:
            raise ValueError("A recurrence rule was given for a non-recurring appointment")
        return self

    def to_appointment(self) -> Appointment:
        """Build the appointment this request describes (the series master for recurring requests)."""
        return Appointment(
            clinician_id=self.clinician_id,
            start_at=self.start_at,
            end_at=self.end_at,
            title=self.title,
            appointment_type=self.appointment_type,
            status=self.status,
            location_id=self.location_id,
            client_group_id=self.client_group_id,
            service_id=self.service_id,
            created_by=self.created_by,
            appointment_fee=self.appointment_fee,
            notes=self.notes,
            is_all_day=self.is_all_day,
            is_recurring=self.is_recurring,
            recurrence_rule=self.recurrence_rule,
        )


class AppointmentChangesDTO(BaseModel):
    """
    Typed partial update; only the fields that were set are applied.

    A field set to ``None`` clears the stored value. Clearing a field the
    appointment cannot be without is rejected.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    title: str | None = None
    notes: str | None = None
    status: AppointmentStatus | None = None
    appointment_type: AppointmentType | None = None
    appointment_fee: Decimal | None = None
    is_all_day: bool | None = None
    location_id: UUID | None = None
    client_group_id: UUID | None = None
    service_id: UUID | None = None
    clinician_id: UUID | None = None
    start_at: datetime | None = None
    end_at: datetime | None = None
    recurrence_rule: RecurrenceRule | None = None

    @model_validator(mode="after")
    def validate_changes(self) -> "AppointmentChangesDTO":
        if not self.model_fields_set:
            raise ValueError("At least one field must be changed")
        cleared = sorted(
            name
            for name in self.model_fields_set & AppointmentChanges.REQUIRED_FIELDS
            if getattr(self, name) is None
        )
        if cleared:
            raise ValueError(f"Fields cannot be cleared: {', '.join(cleared)}")
        if self.start_at is not None and self.end_at is not None and self.end_at < self.start_at:
            raise ValueError("end_at must not be before start_at")
        return self

    def to_changes(self) -> AppointmentChanges:
        return AppointmentChanges(**{name: getattr(self, name) for name in self.model_fields_set})


class UpdateAppointmentRequestDTO(BaseModel):
    """DTO representing an update of one occurrence, its future, or a whole series."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    appointment_id: UUID
    scope: MutationScope = MutationScope.SINGLE
    changes: AppointmentChangesDTO

    def to_changes(self) -> AppointmentChanges:
        return self.changes.to_changes()


class DeleteAppointmentRequestDTO(BaseModel):
    """DTO representing a delete of one occurrence, its future, or a whole series."""

    model_config = ConfigDict(frozen=True)

    appointment_id: UUID
    scope: MutationScope = MutationScope.SINGLE
