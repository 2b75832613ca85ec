"""
Recurrence rule value object.

A compact, iCalendar-inspired description of how an appointment repeats:
a frequency, an interval, an optional weekday set (weekly rules only) and at
most one terminator (an occurrence count or an inclusive end date).
"""

from dataclasses import dataclass, replace
from datetime import date, timedelta
from enum import Enum, IntEnum

from clinic_calendar.domain.exceptions import RuleParseError

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Frequency(str, Enum):
    """Unit a rule steps by."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class Weekday(IntEnum):
    """Day of week, numbered like ``date.weekday()``."""

    MO = 0
    TU = 1
    WE = 2
    TH = 3
    FR = 4
    SA = 5
    SU = 6

    @property
    def code(self) -> str:
        return self.name

    @classmethod
    def of(cls, day: date) -> "Weekday":
        return cls(day.weekday())


# ---------------------------------------------------------------------------
# Value object
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RecurrenceRule:
    """Immutable recurrence rule.

    ``by_weekdays`` is normalised to a deduplicated tuple in Monday..Sunday
    order, so two rules naming the same days in a different order compare
    equal. ``count`` and ``until`` are mutually exclusive; a rule with neither
    is open-ended.
    """

    frequency: Frequency
    interval: int = 1
    by_weekdays: tuple[Weekday, ...] = ()
    count: int | None = None
    until: date | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.frequency, Frequency):
            try:
                object.__setattr__(self, "frequency", Frequency(str(self.frequency).upper()))
            except ValueError as e:
                raise RuleParseError(f"Unrecognized frequency '{self.frequency}'") from e

        if isinstance(self.interval, bool) or not isinstance(self.interval, int) or self.interval < 1:
            raise RuleParseError(f"Interval must be a positive integer, got {self.interval!r}")

        if self.count is not None and (
            isinstance(self.count, bool) or not isinstance(self.count, int) or self.count < 1
        ):
            raise RuleParseError(f"Count must be a positive integer, got {self.count!r}")

        if self.count is not None and self.until is not None:
            raise RuleParseError("A rule cannot have both a count and an until date")

        weekdays = tuple(sorted({Weekday(day) for day in self.by_weekdays}))
        object.__setattr__(self, "by_weekdays", weekdays)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def is_open_ended(self) -> bool:
        return self.count is None and self.until is None

    @property
    def uses_weekdays(self) -> bool:
        """True when the weekday set drives generation (weekly rules only)."""
        return self.frequency is Frequency.WEEKLY and bool(self.by_weekdays)

    # ------------------------------------------------------------------
    # Derived rules
    # ------------------------------------------------------------------

    def with_until(self, until: date) -> "RecurrenceRule":
        """Return a copy ending on ``until`` (inclusive); any count is dropped."""
        return replace(self, count=None, until=until)

    def with_count(self, count: int) -> "RecurrenceRule":
        """Return a copy producing exactly ``count`` occurrences."""
        return replace(self, count=count, until=None)

    def shifted(self, days: int) -> "RecurrenceRule":
        """Return a copy whose weekdays and until date move by ``days``."""
        if not days:
            return self
        weekdays = tuple(Weekday((day + days) % 7) for day in self.by_weekdays)
        until = self.until + timedelta(days=days) if self.until is not None else None
        return replace(self, by_weekdays=weekdays, until=until)
