"""Custom exceptions for gslock.

All exception classes are designed to provide clear, actionable error messages
with context about what went wrong and how to fix it.
"""


class GSLockError(Exception):
    """Base exception for all gslock errors."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class UsageError(GSLockError):
    """Exception raised when the command line is missing required arguments."""


class ConfigurationError(GSLockError):
    """Exception raised for invalid option or environment values.

    Examples:
        - Non-positive --poll-interval
        - "file" backend selected without a root directory
    """

    def __init__(self, message: str, field: str | None = None, details: str | None = None):
        self.field = field
        super().__init__(message, details)


class MalformedLocationError(GSLockError):
    """Exception raised when a lock location cannot be parsed.

    Examples:
        - Missing gs:// scheme
        - Bucket without an object key (gs://bucket or gs://bucket/)
    """

    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"Invalid lock location '{location}'", reason)


class AuthError(GSLockError):
    """Exception raised when the storage client cannot be constructed.

    Attributes:
        source: Where the credentials were expected to come from
    """

    def __init__(self, message: str, source: str | None = None, details: str | None = None):
        self.source = source
        super().__init__(message, details)

    def __str__(self) -> str:
        parts = [f"[{self.source}] {self.message}" if self.source else self.message]
        if self.details:
            parts.append(self.details)
        return " - ".join(parts)


class StorageError(GSLockError):
    """Exception raised for lock store failures.

    Wraps backend errors with context about the operation that failed.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        operation: str | None = None,
        details: str | None = None,
        original_error: Exception | None = None,
    ):
        self.status_code = status_code
        self.operation = operation
        self.original_error = original_error
        super().__init__(message, details)

    def __str__(self) -> str:
        parts = [self.message]
        if self.status_code:
            parts.append(f"HTTP {self.status_code}")
        if self.operation:
            parts.append(f"during {self.operation}")
        if self.details:
            parts.append(self.details)
        return " - ".join(parts)


class GuardedCommandError(GSLockError):
    """Exception raised when the guarded command cannot be started."""

    def __init__(self, command: str, details: str | None = None, original_error: Exception | None = None):
        self.command = command
        self.original_error = original_error
        super().__init__(f"Failed to run command '{command}'", details)
