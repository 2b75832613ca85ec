"""
In-Memory Repository Implementations.

This package contains in-memory implementations of repository interfaces,
used for testing, development, and scenarios where persistent storage is not
required.
"""

from clinic_calendar.infrastructure.repositories.memory.appointment_limit_repository import (
    InMemoryAppointmentLimitRepository,
)
from clinic_calendar.infrastructure.repositories.memory.appointment_repository import (
    InMemoryAppointmentRepository,
)

__all__ = ["InMemoryAppointmentLimitRepository", "InMemoryAppointmentRepository"]
