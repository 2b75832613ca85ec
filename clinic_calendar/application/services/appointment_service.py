"""
Appointment Service

This module provides the use cases of the clinic calendar: creating single
and recurring appointments, updating and deleting occurrences with a scope,
reading series, and managing per-day limit overrides.
"""

import logging
from datetime import date, datetime
from uuid import UUID

from clinic_calendar.application.dtos.appointment_dtos import (
    CreateAppointmentRequestDTO,
    DeleteAppointmentRequestDTO,
    UpdateAppointmentRequestDTO,
)
from clinic_calendar.domain.entities.appointment import Appointment
from clinic_calendar.domain.entities.appointment_limit import AppointmentLimit
from clinic_calendar.domain.entities.series_plan import SeriesPlan
from clinic_calendar.domain.exceptions import (
    OccurrenceNotFoundError,
    SeriesNotFoundError,
    ValidationError,
)
from clinic_calendar.domain.repositories.appointment_limit_repository import (
    IAppointmentLimitRepository,
)
from clinic_calendar.domain.repositories.appointment_repository import AppointmentRepository
from clinic_calendar.domain.services.recurrence.limit_guard import LimitGuard
from clinic_calendar.domain.services.recurrence.occurrence_generator import OccurrenceGenerator
from clinic_calendar.domain.services.recurrence.series_coordinator import (
    SeriesMutationCoordinator,
)

logger = logging.getLogger(__name__)


class AppointmentService:
    """
    Service for managing appointments and recurring series.

    Every operation plans its writes in memory first and then hands the
    plan to the repository in one ``apply_plan`` call, so a failure at any
    step leaves storage untouched.
    """

    def __init__(
        self,
        appointment_repository: AppointmentRepository,
        limit_repository: IAppointmentLimitRepository | None = None,
        max_appointments_per_day: int | None = 8,
        max_occurrences: int = 365,
        horizon_days: int = 365,
    ):
        """
        Initialize the appointment service.

        Args:
            appointment_repository: Repository for appointment data
            limit_repository: Repository for per-day limit overrides
            max_appointments_per_day: Default daily cap per clinician, ``0`` disables it
            max_occurrences: Most occurrences a single rule may produce
            horizon_days: Horizon in days for open-ended rules
        """
        self.appointment_repository = appointment_repository
        self.limit_repository = limit_repository
        self.limit_guard = LimitGuard(
            appointment_repository,
            limit_repository,
            default_max_per_day=max_appointments_per_day,
        )
        self.coordinator = SeriesMutationCoordinator(
            OccurrenceGenerator(
                max_occurrences=max_occurrences,
                horizon_days=horizon_days,
            )
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_appointment(self, appointment_id: UUID) -> Appointment:
        """
        Get an appointment by ID.

        Raises:
            OccurrenceNotFoundError: If the appointment is not found
        """
        appointment = await self.appointment_repository.get_by_id(appointment_id)
        if appointment is None:
            raise OccurrenceNotFoundError(str(appointment_id))
        return appointment

    async def get_series(self, appointment_id: UUID) -> list[Appointment]:
        """
        Get the series any appointment belongs to, master first.

        A standalone appointment is returned as a one-element list.

        Raises:
            OccurrenceNotFoundError: If the appointment is not found
            SeriesNotFoundError: If the series cannot be loaded
        """
        appointment = await self.get_appointment(appointment_id)
        if not appointment.is_recurring:
            return [appointment]
        return await self._load_series(appointment)

    async def list_appointments(
        self,
        start: datetime,
        end: datetime,
        clinician_id: UUID | None = None,
    ) -> list[Appointment]:
        """List appointments starting in ``[start, end)``."""
        if end <= start:
            raise ValidationError("The end of the range must be after its start")
        return await self.appointment_repository.list_by_date_range(start, end, clinician_id)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def create_appointment(self, request: CreateAppointmentRequestDTO) -> list[Appointment]:
        """
        Create an appointment, or a whole recurring series.

        For a recurring request every generated occurrence is checked against
        the clinician's daily limit before anything is written.

        Args:
            request: Creation request

        Returns:
            The created appointments, series master first

        Raises:
            LimitExceededError: If any occurrence falls on a full day
            InvalidAppointmentTimeError: If the rule yields no occurrence
            PlanApplicationError: If storage rejects the plan
        """
        plan = self.coordinator.plan_creation(request.to_appointment())

        for appointment in plan.creates:
            await self.limit_guard.ensure_within_limit(appointment.clinician_id, appointment.day)

        plan = await self.appointment_repository.apply_plan(plan)
        logger.info(
            f"Created {len(plan.creates)} appointment(s) for clinician {request.clinician_id}"
        )
        return list(plan.creates)

    async def update_appointment(self, request: UpdateAppointmentRequestDTO) -> SeriesPlan:
        """
        Update an appointment with a scope.

        Args:
            request: Update request

        Returns:
            The applied plan

        Raises:
            OccurrenceNotFoundError: If the target does not exist
            SeriesNotFoundError: If the target's series cannot be loaded
            InvalidScopeTransitionError: If the scope does not fit the target
            PlanApplicationError: If storage rejects the plan
        """
        changes = request.to_changes()
        target = await self.get_appointment(request.appointment_id)
        series = await self._load_series(target) if target.is_recurring else [target]

        plan = self.coordinator.plan_update(series, target, request.scope, changes)
        plan = await self.appointment_repository.apply_plan(plan)
        logger.info(
            f"Updated appointment {target.id} with scope '{request.scope.value}': {plan.summary()}"
        )
        return plan

    async def delete_appointment(self, request: DeleteAppointmentRequestDTO) -> SeriesPlan:
        """
        Delete an appointment with a scope.

        Args:
            request: Delete request

        Returns:
            The applied plan

        Raises:
            OccurrenceNotFoundError: If the target does not exist
            SeriesNotFoundError: If the target's series cannot be loaded
            InvalidScopeTransitionError: If the scope does not fit the target
            PlanApplicationError: If storage rejects the plan
        """
        target = await self.get_appointment(request.appointment_id)
        series = await self._load_series(target) if target.is_recurring else [target]

        plan = self.coordinator.plan_delete(series, target, request.scope)
        plan = await self.appointment_repository.apply_plan(plan)
        logger.info(
            f"Deleted appointment {target.id} with scope '{request.scope.value}': {plan.summary()}"
        )
        return plan

    # ------------------------------------------------------------------
    # Daily limits
    # ------------------------------------------------------------------

    async def get_daily_limit(self, clinician_id: UUID, day: date) -> int | None:
        """Effective daily cap for the clinician; ``None`` means unlimited."""
        return await self.limit_guard.limit_for(clinician_id, day)

    async def set_daily_limit(self, clinician_id: UUID, day: date, max_limit: int) -> AppointmentLimit:
        """
        Override the daily cap for one clinician and date.

        Raises:
            ValidationError: If no limit repository is configured or the limit is negative
        """
        if self.limit_repository is None:
            raise ValidationError("Daily limit overrides are not supported by this service")
        if max_limit < 0:
            raise ValidationError("Daily limit must not be negative")
        limit = await self.limit_repository.upsert(
            AppointmentLimit(clinician_id=clinician_id, day=day, max_limit=max_limit)
        )
        logger.info(f"Set daily limit for clinician {clinician_id} on {day.isoformat()} to {max_limit}")
        return limit

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _load_series(self, appointment: Appointment) -> list[Appointment]:
        master_id = appointment.master_id
        series = await self.appointment_repository.find_series(master_id)
        if not series or not any(row.id == master_id for row in series):
            raise SeriesNotFoundError(str(master_id))
        return series
