"""Core infrastructure module.

This module exports the configuration, logging, cache and error types
shared by the algorithms and services.
"""

from .config import Settings, get_settings, get_global_settings
from .cache import TieredCache, CacheNamespace
from .exceptions import (
    ServiceException,
    ValidationError,
    InsufficientDataError,
    http_status_for,
)
from .enums import Tier
from .logging import setup_logging, get_logger

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "get_global_settings",
    # Cache
    "TieredCache",
    "CacheNamespace",
    # Exceptions
    "ServiceException",
    "ValidationError",
    "InsufficientDataError",
    "http_status_for",
    # Enums
    "Tier",
    # Logging
    "setup_logging",
    "get_logger",
]
