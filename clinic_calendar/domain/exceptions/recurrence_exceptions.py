"""
Exception classes related to recurrence rules and series mutations.
"""

from clinic_calendar.domain.exceptions.base_exceptions import BaseApplicationError


class RecurrenceError(BaseApplicationError):
    """Base class for recurrence-related exceptions."""

    def __init__(self, message: str = "Recurrence operation failed") -> None:
        super().__init__(message)


class RuleParseError(RecurrenceError):
    """Raised when a recurrence rule string or value is malformed."""

    def __init__(
        self,
        message: str = "Invalid recurrence rule",
        rule: str | None = None,
    ) -> None:
        if rule is not None:
            message = f"{message}: '{rule}'"
        super().__init__(message)
        self.rule = rule


class InvalidScopeTransitionError(RecurrenceError):
    """Raised when a mutation scope cannot be applied to the target occurrence."""

    def __init__(
        self,
        message: str = "Scope is not valid for this appointment",
        scope: str | None = None,
        appointment_id: str | None = None,
    ) -> None:
        if scope:
            message = f"{message} (scope '{scope}')"
        if appointment_id:
            message = f"{message} for appointment {appointment_id}"
        super().__init__(message)
        self.scope = scope
        self.appointment_id = appointment_id
