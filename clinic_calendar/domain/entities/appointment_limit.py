"""
Per-clinician, per-day override of the daily appointment cap.
"""

from dataclasses import dataclass, field
from datetime import date
from uuid import UUID, uuid4


@dataclass
class AppointmentLimit:
    """Daily cap override; ``max_limit <= 0`` means no override for that day."""

    clinician_id: UUID
    day: date
    max_limit: int
    id: UUID = field(default_factory=uuid4)

    @property
    def is_active(self) -> bool:
        return self.max_limit > 0
