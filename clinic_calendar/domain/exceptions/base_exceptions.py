"""
Base exception classes for the application.

This module defines base exception classes that are extended by other
exception classes in the application.
"""


class BaseApplicationError(Exception):
    """Base class for all application exceptions."""

    def __init__(self, message: str = "An application error occurred") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(BaseApplicationError):
    """Error raised when validation fails."""

    def __init__(self, message: str = "Validation failed") -> None:
        super().__init__(message)
