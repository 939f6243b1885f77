"""Pytest configuration and fixtures for gslock tests"""
import logging
import threading

import pytest

from gslock.core.exceptions import StorageError
from gslock.core.locks.backends import (
    AcquireResult,
    AcquireStatus,
    FileLockStore,
    ReleaseResult,
    ReleaseStatus,
)
from gslock.location import LockLocation

GSLOCK_ENV_VARS = (
    "GSLOCK_POLL_INTERVAL",
    "GSLOCK_BACKEND",
    "GSLOCK_FILE_ROOT",
    "GOOGLE_APPLICATION_CREDENTIALS",
    "LOG_LEVEL",
)


class InMemoryLockStore:
    """Thread-safe lock store holding generations in a dict.

    Mirrors GCS semantics: each successful create gets a new, increasing
    generation number, and deletes only succeed for the live generation.
    """

    name = "memory"

    def __init__(self):
        self._mutex = threading.Lock()
        self._objects = {}
        self._next_generation = 1000
        self.create_calls = 0
        self.delete_calls = 0

    def create_if_absent(self, location):
        with self._mutex:
            self.create_calls += 1
            if location in self._objects:
                return AcquireResult(status=AcquireStatus.PRECONDITION_FAILED)
            self._next_generation += 1
            self._objects[location] = self._next_generation
            return AcquireResult(status=AcquireStatus.ACQUIRED, version=self._next_generation)

    def delete_if_version_matches(self, location, version):
        with self._mutex:
            self.delete_calls += 1
            current = self._objects.get(location)
            if current is None:
                return ReleaseResult(
                    status=ReleaseStatus.NOT_FOUND,
                    error=StorageError("Lock object no longer exists", operation="release"),
                )
            if current != version:
                return ReleaseResult(
                    status=ReleaseStatus.PRECONDITION_FAILED,
                    error=StorageError("Lock object was replaced by another holder", operation="release"),
                )
            del self._objects[location]
            return ReleaseResult(status=ReleaseStatus.RELEASED)

    def exists(self, location):
        with self._mutex:
            return location in self._objects

    def version_of(self, location):
        with self._mutex:
            return self._objects.get(location)


@pytest.fixture
def memory_store():
    """Fresh in-memory lock store"""
    return InMemoryLockStore()


@pytest.fixture
def file_store(tmp_path):
    """Filesystem lock store rooted in a temporary directory"""
    return FileLockStore(tmp_path / "locks")


@pytest.fixture
def location():
    """A typical lock location"""
    return LockLocation(container="ops-locks", key="jobs/nightly-backup")


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove gslock-related environment variables and run from an empty directory.

    The working directory change keeps a developer's .env file out of the tests.
    Each variable is set before being removed so monkeypatch restores it even
    when a .env file loaded during the test writes to os.environ directly.
    """
    for name in GSLOCK_ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture(autouse=True)
def reset_root_logging():
    """Drop handlers installed by setup_logging so they never outlive a test's captured streams"""
    original_handlers = list(logging.root.handlers)
    original_level = logging.root.level
    yield
    for handler in logging.root.handlers[:]:
        if handler not in original_handlers:
            handler.close()
            logging.root.removeHandler(handler)
    for handler in original_handlers:
        if handler not in logging.root.handlers:
            logging.root.addHandler(handler)
    logging.root.setLevel(original_level)
