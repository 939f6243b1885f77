"""Core module - Foundation components shared by the CLI and the lock subsystem.

This module provides the basic building blocks used throughout the application:
- Version information
- Custom exceptions
- Configuration dataclasses
- Constants and defaults
"""

from gslock.core.version import __version__

from gslock.core.exceptions import (
    GSLockError,
    UsageError,
    ConfigurationError,
    MalformedLocationError,
    AuthError,
    StorageError,
    GuardedCommandError,
)

from gslock.core.config import (
    LockConfig,
    LogConfig,
)

__all__ = [
    "__version__",
    # Exceptions
    "GSLockError",
    "UsageError",
    "ConfigurationError",
    "MalformedLocationError",
    "AuthError",
    "StorageError",
    "GuardedCommandError",
    # Config
    "LockConfig",
    "LogConfig",
]
