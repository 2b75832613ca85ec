"""
SQLAlchemy model for Appointment entity.

This module defines the SQLAlchemy ORM model for the Appointment entity,
mapping the domain entity to the database schema. The recurrence rule is
stored in its serialized text form on the series master.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column

from clinic_calendar.domain.entities.appointment import (
    Appointment,
    AppointmentStatus,
    AppointmentType,
)
from clinic_calendar.domain.services.recurrence.rule_codec import parse_rule, serialize_rule
from clinic_calendar.infrastructure.persistence.sqlalchemy.config.base import (
    Base,
    TimestampMixin,
)
from clinic_calendar.infrastructure.persistence.sqlalchemy.types import GUID


class AppointmentModel(Base, TimestampMixin):
    """
    SQLAlchemy model for the Appointment entity.

    Maps to the 'appointments' table. Series children reference their
    master through ``series_master_id``.
    """

    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_clinician_start", "clinician_id", "start_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    clinician_id: Mapped[uuid.UUID] = mapped_column(GUID(), nullable=False, index=True)
    location_id: Mapped[uuid.UUID | None] = mapped_column(GUID(), nullable=True)
    client_group_id: Mapped[uuid.UUID | None] = mapped_column(GUID(), nullable=True, index=True)
    service_id: Mapped[uuid.UUID | None] = mapped_column(GUID(), nullable=True)
    created_by: Mapped[uuid.UUID | None] = mapped_column(GUID(), nullable=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    appointment_type: Mapped[AppointmentType] = mapped_column(
        SQLAlchemyEnum(AppointmentType, name="appointment_type", native_enum=False),
        nullable=False,
    )
    status: Mapped[AppointmentStatus] = mapped_column(
        SQLAlchemyEnum(AppointmentStatus, name="appointment_status", native_enum=False),
        nullable=False,
    )
    appointment_fee: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_all_day: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    start_at: Mapped[datetime] = mapped_column(DateTime(), nullable=False)
    end_at: Mapped[datetime] = mapped_column(DateTime(), nullable=False)

    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recurrence_rule: Mapped[str | None] = mapped_column(String(255), nullable=True)
    series_master_id: Mapped[uuid.UUID | None] = mapped_column(
        GUID(),
        ForeignKey("appointments.id"),
        nullable=True,
        index=True,
    )

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    def __repr__(self) -> str:
        """Return string representation of the appointment."""
        return f"<Appointment(id={self.id}, clinician_id={self.clinician_id}, start_at={self.start_at})>"

    @staticmethod
    def column_values(appointment: Appointment) -> dict[str, Any]:
        """
        Column values for a domain appointment, excluding server-managed timestamps.

        Args:
            appointment: Domain Appointment entity

        Returns:
            Mapping of column name to value
        """
        return {
            "id": appointment.id,
            "clinician_id": appointment.clinician_id,
            "location_id": appointment.location_id,
            "client_group_id": appointment.client_group_id,
            "service_id": appointment.service_id,
            "created_by": appointment.created_by,
            "title": appointment.title,
            "appointment_type": appointment.appointment_type,
            "status": appointment.status,
            "appointment_fee": appointment.appointment_fee,
            "notes": appointment.notes,
            "is_all_day": appointment.is_all_day,
            "start_at": appointment.start_at,
            "end_at": appointment.end_at,
            "is_recurring": appointment.is_recurring,
            "recurrence_rule": (
                serialize_rule(appointment.recurrence_rule)
                if appointment.recurrence_rule is not None
                else None
            ),
            "series_master_id": appointment.series_master_id,
            "version": appointment.version,
        }

    @classmethod
    def from_domain(cls, appointment: Appointment) -> "AppointmentModel":
        """Create a SQLAlchemy model instance from a domain entity."""
        return cls(**cls.column_values(appointment))

    def to_domain(self) -> Appointment:
        """
        Convert the model to a domain entity.

        Raises:
            RuleParseError: If the stored recurrence rule is malformed
        """
        return Appointment(
            id=self.id,
            clinician_id=self.clinician_id,
            location_id=self.location_id,
            client_group_id=self.client_group_id,
            service_id=self.service_id,
            created_by=self.created_by,
            title=self.title,
            appointment_type=self.appointment_type,
            status=self.status,
            appointment_fee=self.appointment_fee,
            notes=self.notes,
            is_all_day=self.is_all_day,
            start_at=self.start_at,
            end_at=self.end_at,
            is_recurring=self.is_recurring,
            recurrence_rule=parse_rule(self.recurrence_rule) if self.recurrence_rule else None,
            series_master_id=self.series_master_id,
            version=self.version,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
