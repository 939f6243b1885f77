"""Lock manager orchestrating store selection and lock lifecycle."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from gslock.core.config import LockConfig
from gslock.core.constants import DEFAULT_POLL_INTERVAL_SECONDS, SUPPORTED_BACKENDS
from gslock.core.credentials import create_storage_client
from gslock.core.exceptions import ConfigurationError, StorageError
from gslock.core.locks.backends import (
    AcquireStatus,
    FileLockStore,
    GCSLockStore,
    LockStore,
    LockVersion,
)
from gslock.core.logging import with_log_context
from gslock.location import LockLocation


def create_lock_store(config: LockConfig, *, logger: logging.Logger | None = None) -> LockStore:
    """Create the lock store named by ``config.backend``.

    Raises:
        AuthError: If the Cloud Storage client cannot be built
        ConfigurationError: If the file backend has no root directory
    """
    log = logger or logging.getLogger(__name__)
    requested = (config.backend or "gcs").strip().lower()

    if requested not in SUPPORTED_BACKENDS:
        log.warning("Unknown lock backend '%s'; falling back to gcs", requested)
        requested = "gcs"

    if requested == "file":
        if config.file_root is None:
            raise ConfigurationError("The file backend requires a lock root directory", field="file_root")
        return FileLockStore(config.file_root)

    return GCSLockStore(create_storage_client(config.credentials_file, logger=log))


@dataclass(frozen=True)
class LockHandle:
    """Proof of a successful acquire: where the lock is and which write is ours."""

    location: LockLocation
    version: LockVersion


class LockManager:
    """Blocking lock manager over a single-object compare-and-swap store.

    ``acquire`` polls at a fixed interval until the lock object can be
    created. There is no backoff, jitter, retry limit or waiter ordering.
    ``release`` is best effort and never raises.
    """

    def __init__(
        self,
        store: LockStore,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        logger: logging.Logger | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if poll_interval <= 0:
            raise ConfigurationError("Poll interval must be positive", field="poll_interval", details=str(poll_interval))
        self.store = store
        self.poll_interval = poll_interval
        self.logger = logger or logging.getLogger(__name__)
        self._sleep = sleep

    def acquire(self, location: LockLocation) -> LockHandle:
        """Block until the lock object at ``location`` is ours.

        Raises:
            StorageError: On any store failure other than "already exists".
                No lock is held when this is raised.
        """
        log = with_log_context(self.logger, lock=location.uri, backend=self.store.name)
        attempts = 0
        while True:
            attempts += 1
            result = self.store.create_if_absent(location)

            if result.status is AcquireStatus.ACQUIRED:
                if result.version is None:
                    raise StorageError(
                        "Lock store did not return a version token",
                        operation="create",
                        details=location.uri,
                    )
                log.info(f"Acquired lock {location} (version {result.version}, attempt {attempts})")
                return LockHandle(location=location, version=result.version)

            if result.status is AcquireStatus.PRECONDITION_FAILED:
                if attempts == 1:
                    log.info(f"Lock {location} is held; polling every {self.poll_interval}s")
                else:
                    log.debug(f"Lock {location} still held after {attempts} attempts")
                self._sleep(self.poll_interval)
                continue

            raise result.error or StorageError("Failed to create lock object", operation="create", details=location.uri)

    def release(self, handle: LockHandle) -> bool:
        """Delete our lock object if it is still the version we created.

        Failures are logged as warnings and reported through the return
        value only.
        """
        log = with_log_context(self.logger, lock=handle.location.uri, backend=self.store.name)
        result = self.store.delete_if_version_matches(handle.location, handle.version)
        if result.released:
            log.info(f"Released lock {handle.location}")
            return True
        log.warning(f"Failed to release lock {handle.location}: {result.error or result.status.value}")
        return False

    @contextmanager
    def hold(self, location: LockLocation) -> Iterator[LockHandle]:
        """Hold the lock for the duration of the ``with`` block.

        Release is attempted exactly once on every exit from the block,
        including while an exception is propagating.
        """
        handle = self.acquire(location)
        try:
            yield handle
        finally:
            self.release(handle)
