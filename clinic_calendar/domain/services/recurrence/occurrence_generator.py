"""
Occurrence generator.

Expands a recurrence rule and a seed appointment window into the concrete
list of occurrence windows. Every occurrence keeps the seed's time of day
and duration.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from dateutil.relativedelta import relativedelta

from clinic_calendar.domain.entities.recurrence_rule import (
    Frequency,
    RecurrenceRule,
    Weekday,
)
from clinic_calendar.domain.exceptions import InvalidAppointmentTimeError, ValidationError

_STEP_UNITS = {
    Frequency.DAILY: "days",
    Frequency.WEEKLY: "weeks",
    Frequency.MONTHLY: "months",
    Frequency.YEARLY: "years",
}


@dataclass(frozen=True)
class Occurrence:
    """One concrete start/end window of a series."""

    start: datetime
    end: datetime

    @property
    def day(self) -> date:
        return self.start.date()


def first_matching_day(seed_day: date, weekdays: tuple[Weekday, ...]) -> date:
    """Earliest date on or after ``seed_day`` whose weekday is in ``weekdays``."""
    for offset in range(7):
        candidate = seed_day + timedelta(days=offset)
        if Weekday.of(candidate) in weekdays:
            return candidate
    return seed_day


class OccurrenceGenerator:
    """
    Expands recurrence rules into occurrence windows.

    Rules with a count produce exactly that many occurrences and rules with
    an until date stop after it (inclusive). Open-ended rules are cut at
    ``max_occurrences`` occurrences or ``horizon_days`` past the
    seed date, whichever comes first. Bounded rules that would produce more
    than ``max_occurrences`` occurrences are rejected.
    """

    def __init__(self, max_occurrences: int = 365, horizon_days: int = 365):
        if max_occurrences < 1 or horizon_days < 1:
            raise ValueError("Expansion caps must be positive")
        self.max_occurrences = max_occurrences
        self.horizon_days = horizon_days

    def generate(
        self, rule: RecurrenceRule, seed_start: datetime, seed_end: datetime
    ) -> list[Occurrence]:
        """
        Generate the occurrences of ``rule`` seeded by an appointment window.

        Weekly rules with a weekday set first snap the seed forward to the
        earliest selected weekday; that snapped date is the first occurrence.

        Args:
            rule: Recurrence rule to expand
            seed_start: Start of the seed appointment
            seed_end: End of the seed appointment

        Returns:
            Occurrences in strictly increasing start order

        Raises:
            InvalidAppointmentTimeError: If the seed ends before it starts
            ValidationError: If a bounded rule exceeds ``max_occurrences``
        """
        if seed_end < seed_start:
            raise InvalidAppointmentTimeError("Appointment end time must not be before start time.")
        if rule.count is not None and rule.count > self.max_occurrences:
            raise ValidationError(
                f"Recurrence count {rule.count} exceeds the maximum of {self.max_occurrences}"
            )

        duration = seed_end - seed_start
        time_of_day = seed_start.timetz()
        horizon = seed_start.date() + timedelta(days=self.horizon_days)

        occurrences: list[Occurrence] = []
        for day in self._candidate_days(rule, seed_start.date()):
            if rule.until is not None and day > rule.until:
                break
            if len(occurrences) >= self.max_occurrences:
                if rule.is_open_ended:
                    break
                raise ValidationError(
                    f"Recurrence until {rule.until.isoformat()} yields more than "
                    f"{self.max_occurrences} occurrences"
                )
            if rule.is_open_ended and day > horizon:
                break
            start = datetime.combine(day, time_of_day)
            occurrences.append(Occurrence(start=start, end=start + duration))
            if rule.count is not None and len(occurrences) >= rule.count:
                break
        return occurrences

    def occurrences_from(
        self,
        rule: RecurrenceRule,
        seed_start: datetime,
        seed_end: datetime,
        from_day: date,
    ) -> list[Occurrence]:
        """Occurrences of the series falling on or after ``from_day``."""
        return [
            occurrence
            for occurrence in self.generate(rule, seed_start, seed_end)
            if occurrence.day >= from_day
        ]

    def _candidate_days(self, rule: RecurrenceRule, seed_day: date) -> Iterator[date]:
        # Unbounded and strictly increasing; generate() applies the terminator.
        if rule.uses_weekdays:
            first = first_matching_day(seed_day, rule.by_weekdays)
            week_start = first - timedelta(days=first.weekday())
            while True:
                for weekday in rule.by_weekdays:
                    day = week_start + timedelta(days=int(weekday))
                    if day >= first:
                        yield day
                week_start += timedelta(weeks=rule.interval)
        else:
            unit = _STEP_UNITS[rule.frequency]
            step = 0
            while True:
                # Offsets are taken from the seed so month-end clamping never drifts.
                yield seed_day + relativedelta(**{unit: step * rule.interval})
                step += 1
