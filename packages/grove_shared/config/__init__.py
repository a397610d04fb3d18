"""Public API for shared Grove configuration utilities."""

from .loader import load_settings
from .models import (
    DEFAULT_CONFIG_PATH,
    GroveSettings,
    LoggingSettings,
    StorageSettings,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "GroveSettings",
    "LoggingSettings",
    "StorageSettings",
    "load_settings",
]
