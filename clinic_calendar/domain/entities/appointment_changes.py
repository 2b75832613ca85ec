"""
Partial update payload for appointments.

Only the fields listed in ``AppointmentChanges.MUTABLE_FIELDS`` may be
changed through an update request. A field that is absent was not provided;
a field present with ``None`` clears the stored value.
"""

from collections.abc import ItemsView, Iterator
from types import MappingProxyType
from typing import Any

from clinic_calendar.domain.entities.appointment import Appointment
from clinic_calendar.domain.exceptions import ValidationError


class AppointmentChanges:
    """Immutable set of field name to new value pairs."""

    MUTABLE_FIELDS = frozenset(
        {
            "title",
            "notes",
            "status",
            "appointment_type",
            "appointment_fee",
            "is_all_day",
            "location_id",
            "client_group_id",
            "service_id",
            "clinician_id",
            "start_at",
            "end_at",
            "recurrence_rule",
        }
    )

    # Fields the appointment entity cannot hold as None
    REQUIRED_FIELDS = frozenset(
        {"title", "status", "appointment_type", "is_all_day", "clinician_id", "start_at", "end_at"}
    )

    def __init__(self, **values: Any) -> None:
        unknown = set(values) - self.MUTABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
        cleared = {name for name in self.REQUIRED_FIELDS if name in values and values[name] is None}
        if cleared:
            raise ValidationError(f"Fields cannot be cleared: {', '.join(sorted(cleared))}")
        self._values = MappingProxyType(dict(values))

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AppointmentChanges):
            return NotImplemented
        return dict(self._values) == dict(other._values)

    def __repr__(self) -> str:
        return f"AppointmentChanges({dict(self._values)!r})"

    def items(self) -> ItemsView[str, Any]:
        return self._values.items()

    @property
    def changes_rule(self) -> bool:
        return "recurrence_rule" in self._values

    def apply_to(self, appointment: Appointment, **overrides: Any) -> Appointment:
        """
        Return a copy of ``appointment`` with these changes applied.

        The recurrence rule is never applied here; series planning decides
        where a new rule lands. When ``start_at`` moves without an explicit
        ``end_at``, the appointment keeps its duration.

        Args:
            appointment: Appointment the changes are applied to
            **overrides: Additional fields applied after the changes

        Returns:
            A new appointment instance

        Raises:
            InvalidAppointmentTimeError: If the resulting end precedes the start
        """
        values = dict(self._values)
        values.pop("recurrence_rule", None)
        if "start_at" in values and "end_at" not in values:
            values["end_at"] = values["start_at"] + appointment.duration
        values.update(overrides)
        return appointment.copy_with(**values)
