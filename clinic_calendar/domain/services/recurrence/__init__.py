"""
Recurrence engine.

Rule codec, occurrence expansion, daily limit enforcement and series
mutation planning.
"""

from clinic_calendar.domain.services.recurrence.limit_guard import LimitGuard
from clinic_calendar.domain.services.recurrence.occurrence_generator import (
    Occurrence,
    OccurrenceGenerator,
)
from clinic_calendar.domain.services.recurrence.rule_codec import parse_rule, serialize_rule
from clinic_calendar.domain.services.recurrence.series_coordinator import (
    SeriesMutationCoordinator,
)

__all__ = [
    "LimitGuard",
    "Occurrence",
    "OccurrenceGenerator",
    "SeriesMutationCoordinator",
    "parse_rule",
    "serialize_rule",
]
