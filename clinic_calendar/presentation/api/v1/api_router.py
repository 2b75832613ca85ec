"""
Main API router for version 1 of the Clinic Calendar API.

Aggregates all endpoint routers for this version.
"""

from fastapi import APIRouter

from clinic_calendar.presentation.api.v1.endpoints.appointment_limits import (
    router as appointment_limits_router,
)
from clinic_calendar.presentation.api.v1.endpoints.appointments import (
    router as appointments_router,
)

api_v1_router = APIRouter()

api_v1_router.include_router(appointments_router, prefix="/appointments", tags=["Appointments"])
api_v1_router.include_router(
    appointment_limits_router,
    prefix="/appointment-limits",
    tags=["Appointment Limits"],
)


@api_v1_router.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Liveness check."""
    return {"status": "ok"}
