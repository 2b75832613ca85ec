"""
Application settings module.

This module provides configuration settings for the application, including
database connection, scheduling limits, recurrence expansion caps, and other
environment-specific values.
"""

# Standard Library Imports
import logging
from functools import lru_cache
from typing import Self

# Third-Party Imports
from pydantic import ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings using Pydantic for validation and environment variable loading."""

    # API Information
    API_TITLE: str = "Clinic Calendar API"
    API_DESCRIPTION: str = "Appointment scheduling with recurring series"
    API_V1_STR: str = "/api/v1"

    # Environment
    TESTING: bool = False
    ENVIRONMENT: str = "development"  # development, test, staging, production
    VERSION: str = "0.1.0"
    PROJECT_NAME: str = "Clinic Calendar"
    DEBUG: bool = False

    # Server Settings
    SERVER_HOST: str = "127.0.0.1"
    SERVER_PORT: int = 8000

    # Database Settings
    DATABASE_URL: str = "sqlite+aiosqlite:///./clinic_calendar.db"
    ASYNC_DATABASE_URL: str | None = None  # Derived from DATABASE_URL if None
    DB_ECHO_LOG: bool = False

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str | None = None

    # Monitoring and Error Tracking (Sentry)
    SENTRY_DSN: str | None = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.2

    # Scheduling
    MAX_APPOINTMENTS_PER_DAY: int = Field(
        default=8,
        ge=0,
        description="Default cap of non-cancelled appointments per clinician per day, 0 disables",
    )
    RECURRENCE_MAX_OCCURRENCES: int = Field(
        default=365,
        ge=1,
        description="Maximum number of occurrences a single rule may produce",
    )
    RECURRENCE_HORIZON_DAYS: int = Field(
        default=365,
        ge=1,
        description="How far past the seed date an open-ended rule is expanded",
    )

    model_config = ConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow",
    )

    @field_validator("LOG_LEVEL")
    def validate_log_level(cls, v: str) -> str:
        """Validate that log level is one of the valid levels."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @model_validator(mode="after")
    def ensure_async_database_url(self) -> Self:
        """Ensure ASYNC_DATABASE_URL is set properly from DATABASE_URL."""
        if not self.ASYNC_DATABASE_URL and self.DATABASE_URL:
            db_url = self.DATABASE_URL
            if db_url.startswith("sqlite:///") and "aiosqlite" not in db_url:
                self.ASYNC_DATABASE_URL = db_url.replace("sqlite:///", "sqlite+aiosqlite:///")
            else:
                self.ASYNC_DATABASE_URL = db_url
            logger.debug(f"Set ASYNC_DATABASE_URL to {self.ASYNC_DATABASE_URL} based on DATABASE_URL")

        if not self.ASYNC_DATABASE_URL:
            self.ASYNC_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
            logger.warning("ASYNC_DATABASE_URL was None, set to default in-memory SQLite")

        if self.ENVIRONMENT in ("production", "test"):
            self.DEBUG = False

        return self


@lru_cache
def get_settings() -> Settings:
    """
    Factory function to get the application settings.

    This function enables dependency injection of settings in FastAPI;
    tests override it through ``app.dependency_overrides`` or pass a
    ``Settings`` instance to the application factory.

    Returns:
        The application settings instance
    """
    return Settings()
