"""SQLAlchemy models package.

Importing this package registers every table on ``Base.metadata``.
"""

from clinic_calendar.infrastructure.persistence.sqlalchemy.config.base import Base
from clinic_calendar.infrastructure.persistence.sqlalchemy.models.appointment import (
    AppointmentModel,
)
from clinic_calendar.infrastructure.persistence.sqlalchemy.models.appointment_limit import (
    AppointmentLimitModel,
)

__all__ = ["AppointmentLimitModel", "AppointmentModel", "Base"]
