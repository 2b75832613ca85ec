"""
SQLAlchemy custom types package.
"""

from clinic_calendar.infrastructure.persistence.sqlalchemy.types.guid import GUID

__all__ = ["GUID"]
