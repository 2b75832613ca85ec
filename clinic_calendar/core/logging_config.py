"""
Logging Configuration Module.

This module provides the central logging configuration dictionary for the
application. File logging is opt-in: pass a path to ``setup_logging`` (or set
``LOG_FILE``) to add a rotating file handler next to the console handler.
"""

import copy
import logging
import logging.config
import os
from pathlib import Path
from typing import Any

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LOGGING_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "[%(asctime)s] [%(levelname)s] [%(name)s] - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        "detailed": {
            "format": "[%(asctime)s] [%(levelname)s] [%(name)s:%(lineno)d] - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": LOG_LEVEL,
            "formatter": "standard",
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        "clinic_calendar": {
            "level": LOG_LEVEL,
            "handlers": ["console"],
            "propagate": False,
        },
        "uvicorn": {
            "level": LOG_LEVEL,
            "handlers": ["console"],
            "propagate": False,
        },
        "sqlalchemy.engine": {
            "level": os.getenv("SQL_LOG_LEVEL", "WARNING"),
            "handlers": ["console"],
            "propagate": False,
        },
    },
}


def build_logging_config(
    level: str | None = None, log_file: str | None = None
) -> dict[str, Any]:
    """
    Build a logging configuration derived from ``LOGGING_CONFIG``.

    Args:
        level: Level applied to the application and console handler
        log_file: Optional path of a rotating log file

    Returns:
        A configuration dictionary accepted by ``logging.config.dictConfig``
    """
    config = copy.deepcopy(LOGGING_CONFIG)
    if level:
        config["handlers"]["console"]["level"] = level.upper()
        config["loggers"]["clinic_calendar"]["level"] = level.upper()

    if log_file:
        config["handlers"]["file_handler"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": config["handlers"]["console"]["level"],
            "formatter": "detailed",
            "filename": log_file,
            "maxBytes": 10485760,  # 10MB
            "backupCount": 10,
            "encoding": "utf8",
        }
        for logger_config in config["loggers"].values():
            logger_config["handlers"].append("file_handler")

    return config


def setup_logging(config: dict[str, Any] | None = None) -> None:
    """
    Configure the logging system with the provided configuration or default.

    Args:
        config: Optional logging configuration dictionary to use instead of the default
    """
    if config is None:
        config = LOGGING_CONFIG

    file_handler = config.get("handlers", {}).get("file_handler")
    if file_handler:
        Path(file_handler["filename"]).parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(config)

    logger = logging.getLogger(__name__)
    logger.debug("Logging configured successfully")
