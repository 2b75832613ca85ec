"""
Exception classes related to persistence operations.

This module defines exceptions raised during database and repository operations.
"""

from clinic_calendar.domain.exceptions.base_exceptions import BaseApplicationError


class PersistenceError(BaseApplicationError):
    """Base class for persistence-related exceptions."""

    def __init__(
        self,
        message: str = "Persistence operation failed",
        original_exception: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.original_exception = original_exception


class RepositoryError(PersistenceError):
    """Raised when a repository operation fails."""

    def __init__(
        self,
        message: str = "Repository operation failed",
        repository: str | None = None,
        operation: str | None = None,
        original_exception: Exception | None = None,
    ) -> None:
        if repository and operation:
            message = f"{message} in {repository} during {operation}"
        elif repository:
            message = f"{message} in {repository}"
        super().__init__(message, original_exception)
        self.repository = repository
        self.operation = operation


class PlanApplicationError(PersistenceError):
    """Raised when a series plan could not be applied; no change was persisted."""

    def __init__(
        self,
        message: str = "Failed to apply appointment changes, no changes were made",
        original_exception: Exception | None = None,
    ) -> None:
        super().__init__(message, original_exception)


class ConcurrentSeriesModificationError(PlanApplicationError):
    """Raised when a planned row changed or vanished before the plan was applied."""

    def __init__(
        self,
        appointment_id: str | None = None,
        message: str = "Appointment was modified concurrently, no changes were made",
    ) -> None:
        if appointment_id:
            message = f"{message} (appointment {appointment_id})"
        super().__init__(message)
        self.appointment_id = appointment_id
