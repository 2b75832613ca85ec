"""
Appointment API endpoints.

Create single or recurring appointments, read appointments and series, and
update or delete occurrences with a scope (``single``, ``future`` or ``all``).
Domain errors raised by the service are mapped to HTTP responses by the
exception handlers registered in the application factory.
"""

import logging
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from clinic_calendar.application.dtos.appointment_dtos import (
    CreateAppointmentRequestDTO,
    DeleteAppointmentRequestDTO,
    UpdateAppointmentRequestDTO,
)
from clinic_calendar.domain.entities.series_plan import MutationScope
from clinic_calendar.domain.services.recurrence.rule_codec import parse_rule
from clinic_calendar.presentation.api.v1.dependencies.appointment import AppointmentServiceDep
from clinic_calendar.presentation.api.v1.schemas.appointment import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentUpdate,
    SeriesMutationResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Appointments"],
)


@router.post("", response_model=list[AppointmentResponse], status_code=status.HTTP_201_CREATED)
async def create_appointment(
    payload: AppointmentCreate,
    service: AppointmentServiceDep,
) -> list[AppointmentResponse]:
    """
    Create an appointment or a recurring series.

    Args:
        payload: Appointment data; ``recurrence_rule`` is required when ``is_recurring``
        service: Appointment service

    Returns:
        The created appointments, series master first
    """
    logger.info(f"Creating appointment for clinician {payload.clinician_id} (recurring={payload.is_recurring})")

    rule = parse_rule(payload.recurrence_rule) if payload.recurrence_rule else None
    request = CreateAppointmentRequestDTO(
        **payload.model_dump(exclude={"recurrence_rule"}),
        recurrence_rule=rule,
    )
    created = await service.create_appointment(request)
    return [AppointmentResponse.from_entity(a) for a in created]


@router.get("", response_model=list[AppointmentResponse])
async def list_appointments(
    service: AppointmentServiceDep,
    start: datetime = Query(..., description="Range start (inclusive)"),
    end: datetime = Query(..., description="Range end (exclusive)"),
    clinician_id: UUID | None = Query(None, description="Filter by clinician ID"),
) -> list[AppointmentResponse]:
    """List appointments starting within a date range."""
    appointments = await service.list_appointments(start, end, clinician_id)
    return [AppointmentResponse.from_entity(a) for a in appointments]


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    service: AppointmentServiceDep,
    appointment_id: UUID = Path(..., description="Appointment ID"),
) -> AppointmentResponse:
    """Get one appointment."""
    appointment = await service.get_appointment(appointment_id)
    return AppointmentResponse.from_entity(appointment)


@router.get("/{appointment_id}/series", response_model=list[AppointmentResponse])
async def get_appointment_series(
    service: AppointmentServiceDep,
    appointment_id: UUID = Path(..., description="ID of any appointment in the series"),
) -> list[AppointmentResponse]:
    """Get the whole series an appointment belongs to, ordered by start."""
    series = await service.get_series(appointment_id)
    return [AppointmentResponse.from_entity(a) for a in series]


@router.patch("/{appointment_id}", response_model=SeriesMutationResponse)
async def update_appointment(
    payload: AppointmentUpdate,
    service: AppointmentServiceDep,
    appointment_id: UUID = Path(..., description="Appointment ID"),
    scope: MutationScope = Query(MutationScope.SINGLE, description="Occurrences to update"),
) -> SeriesMutationResponse:
    """
    Update an appointment.

    Args:
        payload: Fields to change; only the fields sent are applied
        service: Appointment service
        appointment_id: Targeted occurrence
        scope: ``single``, ``future`` or ``all``

    Returns:
        Every row created, updated or deleted by the change
    """
    logger.info(f"Updating appointment {appointment_id} with scope '{scope.value}'")
    request = UpdateAppointmentRequestDTO(
        appointment_id=appointment_id,
        scope=scope,
        changes=payload.to_changes(),
    )
    plan = await service.update_appointment(request)
    return SeriesMutationResponse.from_plan(plan)


@router.delete("/{appointment_id}", response_model=SeriesMutationResponse)
async def delete_appointment(
    service: AppointmentServiceDep,
    appointment_id: UUID = Path(..., description="Appointment ID"),
    scope: MutationScope = Query(MutationScope.SINGLE, description="Occurrences to delete"),
) -> SeriesMutationResponse:
    """
    Delete an appointment.

    Args:
        service: Appointment service
        appointment_id: Targeted occurrence
        scope: ``single``, ``future`` or ``all``

    Returns:
        Every row updated or deleted by the change
    """
    logger.info(f"Deleting appointment {appointment_id} with scope '{scope.value}'")
    plan = await service.delete_appointment(
        DeleteAppointmentRequestDTO(appointment_id=appointment_id, scope=scope)
    )
    return SeriesMutationResponse.from_plan(plan)
