"""Core infrastructure module."""

from .config import Settings, get_settings
from .exceptions import (
    # Base exception
    TempMailError,
    # Input
    ValidationError,
    # Upstream provider
    ProviderError,
    ProviderTimeoutError,
    # Configuration
    ConfigurationError,
    # Realtime
    ConnectionLimitError,
)
from .logger import setup_structured_logging

__all__ = [
    "Settings",
    "get_settings",
    "setup_structured_logging",
    "TempMailError",
    "ValidationError",
    "ProviderError",
    "ProviderTimeoutError",
    "ConfigurationError",
    "ConnectionLimitError",
]
