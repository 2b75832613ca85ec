"""
Daily appointment limit guard.

A clinician may hold at most a fixed number of non-cancelled appointments
per calendar day. The cap comes from configuration and can be overridden per
clinician and date through an ``AppointmentLimit`` record.
"""

import logging
from datetime import date
from uuid import UUID

from clinic_calendar.domain.exceptions import LimitExceededError
from clinic_calendar.domain.repositories.appointment_limit_repository import (
    IAppointmentLimitRepository,
)
from clinic_calendar.domain.repositories.appointment_repository import AppointmentRepository

logger = logging.getLogger(__name__)


class LimitGuard:
    """Answers whether one more appointment fits a clinician's day."""

    def __init__(
        self,
        appointment_repository: AppointmentRepository,
        limit_repository: IAppointmentLimitRepository | None = None,
        default_max_per_day: int | None = 8,
    ):
        """
        Initialize the guard.

        Args:
            appointment_repository: Source of per-day appointment counts
            limit_repository: Optional source of per-day overrides
            default_max_per_day: Cap used when no override exists; ``None`` or
                ``0`` means unlimited
        """
        self.appointment_repository = appointment_repository
        self.limit_repository = limit_repository
        self.default_max_per_day = default_max_per_day

    async def limit_for(self, clinician_id: UUID, day: date) -> int | None:
        """Effective cap for the clinician on ``day``; ``None`` means unlimited."""
        if self.limit_repository is not None:
            override = await self.limit_repository.get_for_day(clinician_id, day)
            if override is not None and override.is_active:
                return override.max_limit
        if self.default_max_per_day and self.default_max_per_day > 0:
            return self.default_max_per_day
        return None

    async def exceeds(self, clinician_id: UUID, day: date) -> bool:
        """True when the clinician already holds the maximum for ``day``."""
        return await self._reached_limit(clinician_id, day) is not None

    async def ensure_within_limit(self, clinician_id: UUID, day: date) -> None:
        """
        Raise when one more appointment would break the cap for ``day``.

        Raises:
            LimitExceededError: If the clinician's day is already full
        """
        limit = await self._reached_limit(clinician_id, day)
        if limit is None:
            return
        logger.info(f"Daily limit of {limit} reached for clinician {clinician_id} on {day.isoformat()}")
        raise LimitExceededError(day=day, clinician_id=str(clinician_id), limit=limit)

    async def _reached_limit(self, clinician_id: UUID, day: date) -> int | None:
        """The cap when ``day`` is already full, otherwise ``None``."""
        limit = await self.limit_for(clinician_id, day)
        if limit is None:
            return None
        existing = await self.appointment_repository.count_for_clinician_on_date(clinician_id, day)
        return limit if existing >= limit else None
