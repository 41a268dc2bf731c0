"""Configuration module for reskit."""

from .settings import (
    ConfigurationError,
    CookieSettings,
    FileSettings,
    LoggingSettings,
    RedirectSettings,
    Settings,
    get_settings,
)


__all__ = [
    "ConfigurationError",
    "CookieSettings",
    "FileSettings",
    "LoggingSettings",
    "RedirectSettings",
    "Settings",
    "get_settings",
]
