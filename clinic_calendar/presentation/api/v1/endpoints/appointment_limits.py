"""
Appointment limit API endpoints.

Read the effective daily cap for a clinician and override it for one date.
"""

import logging
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Query

from clinic_calendar.presentation.api.v1.dependencies.appointment import AppointmentServiceDep
from clinic_calendar.presentation.api.v1.schemas.appointment import (
    AppointmentLimitResponse,
    AppointmentLimitUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Appointment Limits"],
)


@router.get("", response_model=AppointmentLimitResponse)
async def get_appointment_limit(
    service: AppointmentServiceDep,
    clinician_id: UUID = Query(..., description="Clinician ID"),
    day: date = Query(..., description="Date to check"),
) -> AppointmentLimitResponse:
    """Get the effective daily cap; ``max_limit`` is null when unlimited."""
    max_limit = await service.get_daily_limit(clinician_id, day)
    return AppointmentLimitResponse(clinician_id=clinician_id, day=day, max_limit=max_limit)


@router.put("", response_model=AppointmentLimitResponse)
async def set_appointment_limit(
    payload: AppointmentLimitUpdate,
    service: AppointmentServiceDep,
) -> AppointmentLimitResponse:
    """Override the daily cap for one clinician and date."""
    await service.set_daily_limit(payload.clinician_id, payload.day, payload.max_limit)
    max_limit = await service.get_daily_limit(payload.clinician_id, payload.day)
    return AppointmentLimitResponse(
        clinician_id=payload.clinician_id,
        day=payload.day,
        max_limit=max_limit,
    )
