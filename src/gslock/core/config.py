"""Configuration dataclasses for gslock.

These dataclasses centralize all configuration options for type safety
and easy testing. They can be created from the environment and then
overridden by command-line arguments.
"""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from gslock.core.constants import (
    BACKEND_ENV_VAR,
    CREDENTIALS_ENV_VAR,
    DEFAULT_BACKEND,
    DEFAULT_LOG_LEVEL,
    DEFAULT_POLL_INTERVAL_SECONDS,
    FILE_ROOT_ENV_VAR,
    LOG_FILE_BACKUP_COUNT,
    LOG_FILE_MAX_BYTES,
    POLL_INTERVAL_ENV_VAR,
)


def _parse_env_numeric(value: str | None, cast: Callable[[str], Any]) -> Any | None:
    """Parse an environment value, returning None when invalid."""
    if value is None:
        return None
    try:
        parsed = cast(value)
    except (TypeError, ValueError):
        return None
    if isinstance(parsed, float) and not math.isfinite(parsed):
        return None
    return parsed


@dataclass
class LockConfig:
    """Configuration for lock acquisition.

    Attributes:
        poll_interval: Fixed delay between acquire attempts in seconds (default: 1.0)
        backend: Lock store backend name, "gcs" or "file" (default: "gcs")
        file_root: Root directory used by the "file" backend
        credentials_file: Service account JSON file for the "gcs" backend
    """

    poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS
    backend: str = DEFAULT_BACKEND
    file_root: Path | None = None
    credentials_file: Path | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> LockConfig:
        """Build a config from environment variables.

        Invalid values are ignored with a warning.
        """
        env = os.environ if environ is None else environ
        logger = logging.getLogger(__name__)
        config = cls()

        raw_interval = env.get(POLL_INTERVAL_ENV_VAR)
        parsed_interval = _parse_env_numeric(raw_interval, float)
        if parsed_interval is not None and parsed_interval > 0:
            config.poll_interval = parsed_interval
        elif raw_interval is not None:
            logger.warning(
                f"Ignoring invalid {POLL_INTERVAL_ENV_VAR}={raw_interval!r}; "
                f"using default {config.poll_interval}"
            )

        backend = env.get(BACKEND_ENV_VAR, "").strip().lower()
        if backend:
            config.backend = backend

        file_root = env.get(FILE_ROOT_ENV_VAR, "").strip()
        if file_root:
            config.file_root = Path(file_root)

        credentials_file = env.get(CREDENTIALS_ENV_VAR, "").strip()
        if credentials_file:
            config.credentials_file = Path(credentials_file)

        return config


@dataclass
class LogConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level string (default: "WARNING")
        log_format: "text" or "json" (default: "text")
        log_file: Optional rotating log file path
        file_max_bytes: Maximum size per log file (default: 10MB)
        file_backup_count: Number of backup log files (default: 5)
    """

    level: str = DEFAULT_LOG_LEVEL
    log_format: str = "text"
    log_file: Path | None = None
    file_max_bytes: int = LOG_FILE_MAX_BYTES
    file_backup_count: int = LOG_FILE_BACKUP_COUNT
