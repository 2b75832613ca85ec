"""SQLAlchemy declarative configuration."""

from clinic_calendar.infrastructure.persistence.sqlalchemy.config.base import Base, TimestampMixin

__all__ = ["Base", "TimestampMixin"]
