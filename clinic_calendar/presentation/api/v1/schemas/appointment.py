"""
API schemas for appointment endpoints.

Recurrence rules travel as strings (``FREQ=WEEKLY;INTERVAL=1;BYDAY=MO,WE;COUNT=10``)
and are parsed into domain rules at the API boundary.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from clinic_calendar.domain.entities.appointment import (
    Appointment,
    AppointmentStatus,
    AppointmentType,
)
from clinic_calendar.domain.entities.series_plan import SeriesPlan
from clinic_calendar.domain.services.recurrence.rule_codec import parse_rule, serialize_rule

# ======== Request Models ========


class AppointmentCreate(BaseModel):
    """Model for creating an appointment or a recurring series."""

    clinician_id: UUID = Field(..., description="Clinician the appointment is booked with")
    start_at: datetime = Field(..., description="Start of the (first) appointment")
    end_at: datetime = Field(..., description="End of the (first) appointment")
    title: str = Field("", max_length=255, description="Title shown on the calendar")
    appointment_type: AppointmentType = Field(AppointmentType.APPOINTMENT, description="Appointment or event")
    status: AppointmentStatus = Field(AppointmentStatus.SCHEDULED, description="Initial status")
    location_id: UUID | None = Field(None, description="Location ID")
    client_group_id: UUID | None = Field(None, description="Client group ID")
    service_id: UUID | None = Field(None, description="Billed service ID")
    created_by: UUID | None = Field(None, description="User creating the appointment")
    appointment_fee: Decimal | None = Field(None, ge=0, description="Fee for the appointment")
    notes: str | None = Field(None, description="Free-text notes")
    is_all_day: bool = Field(False, description="Whether the appointment spans the whole day")
    is_recurring: bool = Field(False, description="Whether to create a recurring series")
    recurrence_rule: str | None = Field(None, description="Recurrence rule string")


class AppointmentUpdate(BaseModel):
    """Model for updating an appointment; only the fields sent are changed."""

    title: str | None = Field(None, max_length=255, description="Title shown on the calendar")
    appointment_type: AppointmentType | None = Field(None, description="Appointment or event")
    status: AppointmentStatus | None = Field(None, description="Status")
    location_id: UUID | None = Field(None, description="Location ID")
    client_group_id: UUID | None = Field(None, description="Client group ID")
    service_id: UUID | None = Field(None, description="Billed service ID")
    clinician_id: UUID | None = Field(None, description="Clinician ID")
    appointment_fee: Decimal | None = Field(None, ge=0, description="Fee for the appointment")
    notes: str | None = Field(None, description="Free-text notes")
    is_all_day: bool | None = Field(None, description="Whether the appointment spans the whole day")
    start_at: datetime | None = Field(None, description="New start")
    end_at: datetime | None = Field(None, description="New end")
    recurrence_rule: str | None = Field(
        None, description="New recurrence rule; null stops the recurrence"
    )

    def to_changes(self) -> dict[str, Any]:
        """
        Fields explicitly sent by the client, with the rule parsed.

        Raises:
            RuleParseError: If the recurrence rule is malformed
        """
        changes = self.model_dump(exclude_unset=True)
        if changes.get("recurrence_rule") is not None:
            changes["recurrence_rule"] = parse_rule(changes["recurrence_rule"])
        return changes


class AppointmentLimitUpdate(BaseModel):
    """Model for overriding a clinician's daily cap on one date."""

    clinician_id: UUID = Field(..., description="Clinician ID")
    day: date = Field(..., description="Date the override applies to")
    max_limit: int = Field(..., ge=0, description="Maximum appointments that day, 0 removes the override")


# ======== Response Models ========


class AppointmentResponse(BaseModel):
    """Response model for an appointment."""

    id: UUID
    clinician_id: UUID
    start_at: datetime
    end_at: datetime
    title: str
    appointment_type: AppointmentType
    status: AppointmentStatus
    location_id: UUID | None = None
    client_group_id: UUID | None = None
    service_id: UUID | None = None
    created_by: UUID | None = None
    appointment_fee: Decimal | None = None
    notes: str | None = None
    is_all_day: bool = False
    is_recurring: bool = False
    recurrence_rule: str | None = None
    series_master_id: UUID | None = None
    version: int = 1

    @classmethod
    def from_entity(cls, appointment: Appointment) -> "AppointmentResponse":
        """Create response model from domain entity."""
        return cls(
            id=appointment.id,
            clinician_id=appointment.clinician_id,
            start_at=appointment.start_at,
            end_at=appointment.end_at,
            title=appointment.title,
            appointment_type=appointment.appointment_type,
            status=appointment.status,
            location_id=appointment.location_id,
            client_group_id=appointment.client_group_id,
            service_id=appointment.service_id,
            created_by=appointment.created_by,
            appointment_fee=appointment.appointment_fee,
            notes=appointment.notes,
            is_all_day=appointment.is_all_day,
            is_recurring=appointment.is_recurring,
            recurrence_rule=(
                serialize_rule(appointment.recurrence_rule) if appointment.recurrence_rule else None
            ),
            series_master_id=appointment.series_master_id,
            version=appointment.version,
        )


class SeriesMutationResponse(BaseModel):
    """Response model describing every row an update or delete touched."""

    created: list[AppointmentResponse] = Field(default_factory=list)
    updated: list[AppointmentResponse] = Field(default_factory=list)
    deleted_ids: list[UUID] = Field(default_factory=list)

    @classmethod
    def from_plan(cls, plan: SeriesPlan) -> "SeriesMutationResponse":
        return cls(
            created=[AppointmentResponse.from_entity(a) for a in plan.creates],
            updated=[AppointmentResponse.from_entity(a) for a in plan.updates],
            deleted_ids=plan.deleted_ids,
        )


class AppointmentLimitResponse(BaseModel):
    """Effective daily cap for a clinician on one date."""

    clinician_id: UUID
    day: date
    max_limit: int | None = Field(None, description="Effective cap, null when unlimited")
