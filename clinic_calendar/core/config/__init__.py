"""
Configuration package.

Re-exports the settings class and its cached accessor.
"""

from clinic_calendar.core.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
