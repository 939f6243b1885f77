"""Locking subsystem for cross-host coordination.

This package centralizes lock acquisition/release behavior behind
store abstractions so the CLI can use a stable API.
"""

from gslock.core.locks.backends import (
    AcquireResult,
    AcquireStatus,
    FileLockStore,
    GCSLockStore,
    LockStore,
    ReleaseResult,
    ReleaseStatus,
)
from gslock.core.locks.manager import LockHandle, LockManager, create_lock_store

__all__ = [
    "AcquireResult",
    "AcquireStatus",
    "FileLockStore",
    "GCSLockStore",
    "LockHandle",
    "LockManager",
    "LockStore",
    "ReleaseResult",
    "ReleaseStatus",
    "create_lock_store",
]
