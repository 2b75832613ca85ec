"""
SQLAlchemy model for per-day appointment limit overrides.
"""

import uuid
from datetime import date

from sqlalchemy import Date, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from clinic_calendar.domain.entities.appointment_limit import AppointmentLimit
from clinic_calendar.infrastructure.persistence.sqlalchemy.config.base import (
    Base,
    TimestampMixin,
)
from clinic_calendar.infrastructure.persistence.sqlalchemy.types import GUID


class AppointmentLimitModel(Base, TimestampMixin):
    """Maps to the 'appointment_limits' table, one row per clinician and day."""

    __tablename__ = "appointment_limits"
    __table_args__ = (
        UniqueConstraint("clinician_id", "day", name="uq_appointment_limits_clinician_day"),
    )

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    clinician_id: Mapped[uuid.UUID] = mapped_column(GUID(), nullable=False, index=True)
    day: Mapped[date] = mapped_column(Date, nullable=False)
    max_limit: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<AppointmentLimit(clinician_id={self.clinician_id}, day={self.day}, max_limit={self.max_limit})>"

    @classmethod
    def from_domain(cls, limit: AppointmentLimit) -> "AppointmentLimitModel":
        return cls(
            id=limit.id,
            clinician_id=limit.clinician_id,
            day=limit.day,
            max_limit=limit.max_limit,
        )

    def to_domain(self) -> AppointmentLimit:
        return AppointmentLimit(
            id=self.id,
            clinician_id=self.clinician_id,
            day=self.day,
            max_limit=self.max_limit,
        )
