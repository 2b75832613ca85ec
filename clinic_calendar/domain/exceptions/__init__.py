"""
Domain exceptions package.

Re-exports every exception type so callers can import from one place.
"""

from clinic_calendar.domain.exceptions.appointment_exceptions import (
    AppointmentError,
    InvalidAppointmentTimeError,
    LimitExceededError,
    OccurrenceNotFoundError,
    SeriesNotFoundError,
)
from clinic_calendar.domain.exceptions.base_exceptions import (
    BaseApplicationError,
    ValidationError,
)
from clinic_calendar.domain.exceptions.persistence_exceptions import (
    ConcurrentSeriesModificationError,
    PersistenceError,
    PlanApplicationError,
    RepositoryError,
)
from clinic_calendar.domain.exceptions.recurrence_exceptions import (
    InvalidScopeTransitionError,
    RecurrenceError,
    RuleParseError,
)

__all__ = [
    "AppointmentError",
    "BaseApplicationError",
    "ConcurrentSeriesModificationError",
    "InvalidAppointmentTimeError",
    "InvalidScopeTransitionError",
    "LimitExceededError",
    "OccurrenceNotFoundError",
    "PersistenceError",
    "PlanApplicationError",
    "RecurrenceError",
    "RepositoryError",
    "RuleParseError",
    "SeriesNotFoundError",
    "ValidationError",
]
