"""Lock store implementations.

Design principles:
- Ownership is defined by the store's own conditional primitives:
  create-if-absent and delete-if-version-matches. No local state is
  treated as lock truth.
- Stores never raise for expected outcomes. An existing lock or a
  version mismatch is reported as a distinct status so callers never
  have to inspect backend error objects.
- Cloud Storage lock objects are empty; only their existence and
  generation matter.
"""

from __future__ import annotations

import contextlib
import os
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import quote

from google.api_core.exceptions import GoogleAPIError, NotFound, PreconditionFailed
from google.auth.exceptions import GoogleAuthError

from gslock.core.exceptions import StorageError
from gslock.location import LockLocation

LockVersion = int | str

# Transport failures from the storage client surface as requests errors,
# which are OSError subclasses.
_GCS_ERRORS = (GoogleAPIError, GoogleAuthError, OSError)


class AcquireStatus(Enum):
    ACQUIRED = "acquired"
    PRECONDITION_FAILED = "precondition_failed"
    ERROR = "error"


class ReleaseStatus(Enum):
    RELEASED = "released"
    PRECONDITION_FAILED = "precondition_failed"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class AcquireResult:
    """Outcome of one create-if-absent attempt."""

    status: AcquireStatus
    version: LockVersion | None = None
    error: StorageError | None = None


@dataclass(frozen=True)
class ReleaseResult:
    """Outcome of one delete-if-version-matches attempt."""

    status: ReleaseStatus
    error: StorageError | None = None

    @property
    def released(self) -> bool:
        return self.status is ReleaseStatus.RELEASED


class LockStore(Protocol):
    """Backend abstraction over single-object compare-and-swap."""

    name: str

    def create_if_absent(self, location: LockLocation) -> AcquireResult:
        """Create an empty lock object only if none exists at ``location``."""

    def delete_if_version_matches(self, location: LockLocation, version: LockVersion) -> ReleaseResult:
        """Delete the lock object only if it is still the ``version`` we created."""

    def exists(self, location: LockLocation) -> bool:
        """Report whether a lock object currently exists at ``location``."""


def _storage_error(message: str, operation: str, location: LockLocation, error: Exception) -> StorageError:
    code = getattr(error, "code", None)
    return StorageError(
        message,
        status_code=code if isinstance(code, int) else None,
        operation=operation,
        details=f"{location.uri}: {error}",
        original_error=error,
    )


class GCSLockStore:
    """Google Cloud Storage lock store.

    Create-if-absent is an upload with ``if_generation_match=0``; the object
    generation assigned by GCS is the version token. Release deletes with
    ``if_generation_match=<generation>`` so a lock re-created by another
    holder is never removed.
    """

    name = "gcs"

    def __init__(self, client: Any):
        self.client = client

    def _blob(self, location: LockLocation) -> Any:
        return self.client.bucket(location.container).blob(location.key)

    def create_if_absent(self, location: LockLocation) -> AcquireResult:
        blob = self._blob(location)
        try:
            # No client-side retry: a retried create whose first attempt landed
            # would see our own object as someone else's lock.
            blob.upload_from_string(
                b"",
                content_type="application/octet-stream",
                if_generation_match=0,
                retry=None,
            )
        except PreconditionFailed:
            return AcquireResult(status=AcquireStatus.PRECONDITION_FAILED)
        except _GCS_ERRORS as e:
            return AcquireResult(
                status=AcquireStatus.ERROR,
                error=_storage_error("Failed to create lock object", "create", location, e),
            )
        return AcquireResult(status=AcquireStatus.ACQUIRED, version=blob.generation)

    def delete_if_version_matches(self, location: LockLocation, version: LockVersion) -> ReleaseResult:
        blob = self._blob(location)
        try:
            blob.delete(if_generation_match=version)
        except PreconditionFailed as e:
            return ReleaseResult(
                status=ReleaseStatus.PRECONDITION_FAILED,
                error=_storage_error("Lock object was replaced by another holder", "release", location, e),
            )
        except NotFound as e:
            return ReleaseResult(
                status=ReleaseStatus.NOT_FOUND,
                error=_storage_error("Lock object no longer exists", "release", location, e),
            )
        except _GCS_ERRORS as e:
            return ReleaseResult(
                status=ReleaseStatus.ERROR,
                error=_storage_error("Failed to delete lock object", "release", location, e),
            )
        return ReleaseResult(status=ReleaseStatus.RELEASED)

    def exists(self, location: LockLocation) -> bool:
        try:
            return bool(self._blob(location).exists())
        except _GCS_ERRORS as e:
            raise _storage_error("Failed to check lock object", "exists", location, e) from e


def _write_all(fd: int, payload: bytes) -> None:
    """Write complete payload to fd, handling short writes."""
    total_written = 0
    while total_written < len(payload):
        written = os.write(fd, payload[total_written:])
        if written <= 0:
            raise OSError("short write while persisting lock token")
        total_written += written


class FileLockStore:
    """Filesystem lock store for hosts sharing a directory.

    Create-if-absent is ``O_CREAT | O_EXCL``. A filesystem assigns no
    generation numbers, so each created file holds a random token that
    serves as its version. The token check and unlink in release are two
    steps, so this store is only as strong as the filesystem's
    exclusive-create guarantee.

    Each lock is one flat file, ``<root>/<bucket>/<percent-encoded key>``.
    Keys like ``jobs`` and ``jobs/x`` are independent objects in Cloud
    Storage and must not nest as directory and file here.
    """

    name = "file"

    def __init__(self, root: Path):
        self.root = Path(root)

    def path_for(self, location: LockLocation) -> Path:
        container = quote(location.container, safe="")
        key = quote(location.key, safe="")
        if container in (".", "..") or key in (".", ".."):
            raise StorageError(
                "Lock key escapes the lock root",
                operation="resolve",
                details=location.uri,
            )
        return self.root.resolve() / container / key

    def create_if_absent(self, location: LockLocation) -> AcquireResult:
        try:
            path = self.path_for(location)
            path.parent.mkdir(parents=True, exist_ok=True)
        except StorageError as e:
            return AcquireResult(status=AcquireStatus.ERROR, error=e)
        except OSError as e:
            return AcquireResult(
                status=AcquireStatus.ERROR,
                error=_storage_error("Failed to create lock directory", "create", location, e),
            )

        token = uuid.uuid4().hex
        try:
            fd = os.open(str(path), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError as e:
            if path.is_dir():
                return AcquireResult(
                    status=AcquireStatus.ERROR,
                    error=_storage_error("Lock path is a directory", "create", location, e),
                )
            return AcquireResult(status=AcquireStatus.PRECONDITION_FAILED)
        except OSError as e:
            return AcquireResult(
                status=AcquireStatus.ERROR,
                error=_storage_error("Failed to create lock file", "create", location, e),
            )

        try:
            _write_all(fd, token.encode("ascii"))
            os.fsync(fd)
        except OSError as e:
            with contextlib.suppress(OSError):
                path.unlink()
            return AcquireResult(
                status=AcquireStatus.ERROR,
                error=_storage_error("Failed to write lock token", "create", location, e),
            )
        finally:
            with contextlib.suppress(OSError):
                os.close(fd)
        return AcquireResult(status=AcquireStatus.ACQUIRED, version=token)

    def delete_if_version_matches(self, location: LockLocation, version: LockVersion) -> ReleaseResult:
        try:
            path = self.path_for(location)
            current = path.read_text(encoding="ascii").strip()
            if current != version:
                return ReleaseResult(
                    status=ReleaseStatus.PRECONDITION_FAILED,
                    error=StorageError(
                        "Lock file was replaced by another holder",
                        operation="release",
                        details=f"{location.uri}: expected version {version}, found {current or '<empty>'}",
                    ),
                )
            path.unlink()
        except FileNotFoundError as e:
            return ReleaseResult(
                status=ReleaseStatus.NOT_FOUND,
                error=_storage_error("Lock file no longer exists", "release", location, e),
            )
        except StorageError as e:
            return ReleaseResult(status=ReleaseStatus.ERROR, error=e)
        except (OSError, UnicodeDecodeError) as e:
            return ReleaseResult(
                status=ReleaseStatus.ERROR,
                error=_storage_error("Failed to delete lock file", "release", location, e),
            )
        return ReleaseResult(status=ReleaseStatus.RELEASED)

    def exists(self, location: LockLocation) -> bool:
        return self.path_for(location).is_file()
