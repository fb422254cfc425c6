"""Public API for file transport configuration."""

from .loader import load_settings
from .models import (
    DEFAULT_CONFIG_PATH,
    FileTransportSettings,
    LoggingSettings,
    TransportSettings,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "FileTransportSettings",
    "LoggingSettings",
    "TransportSettings",
    "load_settings",
]
