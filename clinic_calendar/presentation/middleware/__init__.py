"""HTTP middleware for the Clinic Calendar API."""

from clinic_calendar.presentation.middleware.request_id import RequestIdMiddleware
from clinic_calendar.presentation.middleware.request_logging import RequestLoggingMiddleware

__all__ = ["RequestIdMiddleware", "RequestLoggingMiddleware"]
