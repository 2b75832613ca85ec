"""
Clinic Calendar FastAPI Application

This is the main application entry point. It creates the application through
the factory and runs it with Uvicorn when executed directly.
"""

import logging

import uvicorn

from clinic_calendar.app_factory import create_application
from clinic_calendar.core.config.settings import get_settings

logger = logging.getLogger(__name__)

# This is the exported app that Uvicorn uses when run with "clinic_calendar.main:app"
app = create_application()


def run() -> None:
    """Run the API server with Uvicorn."""
    settings = get_settings()
    logger.info(
        f"Starting Uvicorn server. Host: {settings.SERVER_HOST}, Port: {settings.SERVER_PORT}, "
        f"LogLevel: {settings.LOG_LEVEL.lower()}"
    )
    uvicorn.run(
        "clinic_calendar.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        log_level=settings.LOG_LEVEL.lower(),
        reload=settings.ENVIRONMENT == "development",
    )


if __name__ == "__main__":
    run()
