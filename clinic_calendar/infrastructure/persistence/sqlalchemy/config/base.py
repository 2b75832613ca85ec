"""
SQLAlchemy base configuration.

This module provides the declarative base shared by every ORM model and the
timestamp mixin used by calendar tables.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, MetaData
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func

metadata = MetaData()


class Base(AsyncAttrs, DeclarativeBase):
    """SQLAlchemy 2.0 declarative base with async attribute support."""

    metadata = metadata


class TimestampMixin:
    """Adds server-managed ``created_at`` and ``updated_at`` columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
