"""Constants and default values for gslock.

This module centralizes all magic numbers, environment variable names and
exit codes used throughout the application.
"""

# ==================== LOCATIONS ====================

GS_SCHEME: str = "gs://"

# ==================== LOCK DEFAULTS ====================

DEFAULT_POLL_INTERVAL_SECONDS: float = 1.0  # Fixed delay between acquire attempts
DEFAULT_BACKEND: str = "gcs"
SUPPORTED_BACKENDS: tuple[str, ...] = ("gcs", "file")

# ==================== ENVIRONMENT ====================

POLL_INTERVAL_ENV_VAR = "GSLOCK_POLL_INTERVAL"
BACKEND_ENV_VAR = "GSLOCK_BACKEND"
FILE_ROOT_ENV_VAR = "GSLOCK_FILE_ROOT"
CREDENTIALS_ENV_VAR = "GOOGLE_APPLICATION_CREDENTIALS"
LOG_LEVEL_ENV_VAR = "LOG_LEVEL"

# ==================== LOGGING DEFAULTS ====================

DEFAULT_LOG_LEVEL: str = "WARNING"
LOG_FILE_MAX_BYTES: int = 10 * 1024 * 1024  # 10MB max per log file
LOG_FILE_BACKUP_COUNT: int = 5  # Number of backup log files to keep

# ==================== EXIT CODES ====================

EXIT_FAILURE: int = 1
EXIT_INTERRUPTED: int = 130  # 128 + SIGINT
SIGNAL_EXIT_BASE: int = 128
