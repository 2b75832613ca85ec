"""
Shared fixtures for the Clinic Calendar test suite.

Dates are anchored on Monday 2025-01-06 so weekday arithmetic in the tests
stays readable.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID, uuid4

import pytest
from faker import Faker

from clinic_calendar.application.services.appointment_service import AppointmentService
from clinic_calendar.core.config.settings import Settings
from clinic_calendar.domain.entities.appointment import Appointment
from clinic_calendar.domain.entities.recurrence_rule import Frequency, RecurrenceRule, Weekday
from clinic_calendar.domain.services.recurrence.series_coordinator import (
    SeriesMutationCoordinator,
)
from clinic_calendar.infrastructure.repositories.memory import (
    InMemoryAppointmentLimitRepository,
    InMemoryAppointmentRepository,
)

logger = logging.getLogger(__name__)

fake = Faker()

MONDAY = datetime(2025, 1, 6, 9, 0)


@pytest.fixture
def test_settings() -> Settings:
    """Settings for tests: in-memory SQLite and quiet logging."""
    return Settings(
        ENVIRONMENT="test",
        TESTING=True,
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        LOG_LEVEL="WARNING",
        SENTRY_DSN=None,
        MAX_APPOINTMENTS_PER_DAY=8,
    )


@pytest.fixture
def clinician_id() -> UUID:
    return uuid4()


@pytest.fixture
def make_appointment(clinician_id: UUID) -> Callable[..., Appointment]:
    """Factory for appointments; one hour on Monday 2025-01-06 09:00 by default."""

    def _make(**overrides: Any) -> Appointment:
        start_at = overrides.pop("start_at", MONDAY)
        values: dict[str, Any] = {
            "clinician_id": clinician_id,
            "start_at": start_at,
            "end_at": start_at + timedelta(hours=1),
            "title": fake.sentence(nb_words=3),
            "notes": fake.text(max_nb_chars=60),
        }
        values.update(overrides)
        return Appointment(**values)

    return _make


@pytest.fixture
def weekly_rule() -> RecurrenceRule:
    """Mondays and Wednesdays, ten occurrences."""
    return RecurrenceRule(
        frequency=Frequency.WEEKLY,
        by_weekdays=(Weekday.MO, Weekday.WE),
        count=10,
    )


@pytest.fixture
def coordinator() -> SeriesMutationCoordinator:
    return SeriesMutationCoordinator()


@pytest.fixture
def weekly_series(
    coordinator: SeriesMutationCoordinator,
    make_appointment: Callable[..., Appointment],
    weekly_rule: RecurrenceRule,
) -> list[Appointment]:
    """
    A materialised ten-occurrence series, master first.

    Jan 6, 8, 13, 15, 20, 22, 27, 29, Feb 3, 5 (2025), 09:00-10:00.
    """
    template = make_appointment(is_recurring=True, recurrence_rule=weekly_rule)
    return list(coordinator.plan_creation(template).creates)


@pytest.fixture
def appointment_repository() -> InMemoryAppointmentRepository:
    return InMemoryAppointmentRepository()


@pytest.fixture
def limit_repository() -> InMemoryAppointmentLimitRepository:
    return InMemoryAppointmentLimitRepository()


@pytest.fixture
def appointment_service(
    appointment_repository: InMemoryAppointmentRepository,
    limit_repository: InMemoryAppointmentLimitRepository,
) -> AppointmentService:
    return AppointmentService(
        appointment_repository=appointment_repository,
        limit_repository=limit_repository,
        max_appointments_per_day=8,
    )
