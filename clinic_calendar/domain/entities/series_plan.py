"""
Series plan: the complete set of writes produced by one scheduling operation.

A plan is computed entirely in memory and then handed to the repository,
which applies it atomically. Updates and deletes carry the ``version`` the
planner saw so the repository can detect concurrent writers.
"""

from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID

from clinic_calendar.domain.entities.appointment import Appointment


class MutationScope(str, Enum):
    """Which occurrences of a series an update or delete touches."""

    SINGLE = "single"
    FUTURE = "future"
    ALL = "all"


@dataclass(frozen=True)
class SeriesPlan:
    """Rows to create, update and delete, applied all-or-nothing."""

    creates: tuple[Appointment, ...] = field(default_factory=tuple)
    updates: tuple[Appointment, ...] = field(default_factory=tuple)
    deletes: tuple[Appointment, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "creates", tuple(self.creates))
        object.__setattr__(self, "updates", tuple(self.updates))
        object.__setattr__(self, "deletes", tuple(self.deletes))

    @property
    def is_empty(self) -> bool:
        return not (self.creates or self.updates or self.deletes)

    @property
    def deleted_ids(self) -> list[UUID]:
        return [appointment.id for appointment in self.deletes]

    def summary(self) -> str:
        return f"{len(self.creates)} create(s), {len(self.updates)} update(s), {len(self.deletes)} delete(s)"
