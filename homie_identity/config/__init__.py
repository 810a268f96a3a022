"""Configuration module."""
from .settings import (
    APISettings,
    AuthSettings,
    CleanupSettings,
    DatabaseSettings,
    EmailSettings,
    MonitoringSettings,
    Settings,
    get_settings,
)

__all__ = [
    "APISettings",
    "AuthSettings",
    "CleanupSettings",
    "DatabaseSettings",
    "EmailSettings",
    "MonitoringSettings",
    "Settings",
    "get_settings",
]
