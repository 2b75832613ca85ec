"""
Domain entities package.
"""

from clinic_calendar.domain.entities.appointment import (
    Appointment,
    AppointmentStatus,
    AppointmentType,
)
from clinic_calendar.domain.entities.appointment_changes import AppointmentChanges
from clinic_calendar.domain.entities.appointment_limit import AppointmentLimit
from clinic_calendar.domain.entities.recurrence_rule import (
    Frequency,
    RecurrenceRule,
    Weekday,
)
from clinic_calendar.domain.entities.series_plan import MutationScope, SeriesPlan

__all__ = [
    "Appointment",
    "AppointmentChanges",
    "AppointmentLimit",
    "AppointmentStatus",
    "AppointmentType",
    "Frequency",
    "MutationScope",
    "RecurrenceRule",
    "SeriesPlan",
    "Weekday",
]
