"""
Application Factory Module.

This module contains the factory function for creating a FastAPI application
with its database lifespan, routers and domain exception handlers.
"""

# Standard Library Imports
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

# Third-Party Imports
import sentry_sdk
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

# Application-Specific Imports
from clinic_calendar.core.config.settings import Settings, get_settings
from clinic_calendar.core.logging_config import build_logging_config, setup_logging
from clinic_calendar.domain.exceptions import (
    BaseApplicationError,
    ConcurrentSeriesModificationError,
    InvalidAppointmentTimeError,
    InvalidScopeTransitionError,
    LimitExceededError,
    OccurrenceNotFoundError,
    PersistenceError,
    RuleParseError,
    SeriesNotFoundError,
    ValidationError,
)
from clinic_calendar.infrastructure.persistence.sqlalchemy.database import (
    create_engine,
    create_session_factory,
    create_tables,
)
from clinic_calendar.presentation.api.v1.api_router import api_v1_router
from clinic_calendar.presentation.middleware import RequestIdMiddleware, RequestLoggingMiddleware

logger = logging.getLogger(__name__)

# Most specific classes first; the first match wins.
EXCEPTION_STATUS_CODES: list[tuple[type[BaseApplicationError], int]] = [
    (RuleParseError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (InvalidAppointmentTimeError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (OccurrenceNotFoundError, status.HTTP_404_NOT_FOUND),
    (SeriesNotFoundError, status.HTTP_404_NOT_FOUND),
    (LimitExceededError, status.HTTP_409_CONFLICT),
    (InvalidScopeTransitionError, status.HTTP_409_CONFLICT),
    (ConcurrentSeriesModificationError, status.HTTP_409_CONFLICT),
    (PersistenceError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


# --- Helper Functions ---
def _initialize_sentry(settings: Settings) -> None:
    """Initializes Sentry if DSN is provided."""
    if settings.SENTRY_DSN:
        logger.info("Sentry DSN found, initializing Sentry.")
        sentry_sdk.init(
            dsn=str(settings.SENTRY_DSN),
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
            environment=settings.ENVIRONMENT,
            release=settings.VERSION,
        )
    else:
        logger.info("Sentry DSN not provided, skipping Sentry initialization.")


def status_code_for(exc: BaseApplicationError) -> int:
    for exc_type, status_code in EXCEPTION_STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application.

    Creates the database engine and session factory on startup (unless a
    session factory was already placed on ``app.state``), creates the
    schema, and disposes the engine on shutdown.
    """
    current_settings: Settings = fastapi_app.state.settings
    db_engine = None

    if getattr(fastapi_app.state, "session_factory", None) is None:
        db_engine = create_engine(current_settings)
        try:
            await create_tables(db_engine)
        except Exception:
            logger.critical("Failed to initialize the database", exc_info=True)
            await db_engine.dispose()
            raise
        fastapi_app.state.db_engine = db_engine
        fastapi_app.state.session_factory = create_session_factory(db_engine)
        logger.info(f"Database initialized for environment '{current_settings.ENVIRONMENT}'")

    try:
        yield
    finally:
        if db_engine is not None:
            logger.info("Disposing database engine...")
            await db_engine.dispose()
            fastapi_app.state.session_factory = None


def create_application(settings_override: Settings | None = None) -> FastAPI:
    """
    Create and configure a FastAPI application instance.

    Args:
        settings_override: Override default settings (useful for testing)

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    current_settings = settings_override or get_settings()
    setup_logging(build_logging_config(current_settings.LOG_LEVEL, current_settings.LOG_FILE))
    logger.info(f"Creating application for environment: {current_settings.ENVIRONMENT}")

    _initialize_sentry(current_settings)

    app_instance = FastAPI(
        title=current_settings.API_TITLE,
        description=current_settings.API_DESCRIPTION,
        version=current_settings.VERSION,
        lifespan=lifespan,
        debug=current_settings.DEBUG,
    )
    app_instance.state.settings = current_settings
    app_instance.dependency_overrides[get_settings] = lambda: current_settings

    @app_instance.exception_handler(BaseApplicationError)
    async def application_error_handler(request: Request, exc: BaseApplicationError) -> JSONResponse:
        """Map domain errors to HTTP responses."""
        status_code = status_code_for(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}")
        else:
            logger.info(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}")

        content: dict[str, object] = {"detail": exc.message}
        if isinstance(exc, LimitExceededError):
            content["date"] = exc.day.isoformat()
        return JSONResponse(status_code=status_code, content=content)

    @app_instance.exception_handler(PydanticValidationError)
    async def dto_validation_error_handler(
        request: Request, exc: PydanticValidationError
    ) -> JSONResponse:
        """Request DTOs are validated after FastAPI's own body validation."""
        logger.warning(f"Request validation error: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": [{"loc": e["loc"], "msg": e["msg"], "type": e["type"]} for e in exc.errors()]},
        )

    # Last added runs first: request IDs are assigned before logging sees the request.
    app_instance.add_middleware(RequestLoggingMiddleware)
    app_instance.add_middleware(RequestIdMiddleware)

    app_instance.include_router(api_v1_router, prefix=current_settings.API_V1_STR)

    return app_instance
