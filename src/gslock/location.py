"""Lock location parsing."""

from __future__ import annotations

from dataclasses import dataclass

from gslock.core.constants import GS_SCHEME
from gslock.core.exceptions import MalformedLocationError


@dataclass(frozen=True)
class LockLocation:
    """Bucket and object key that identify one lock."""

    container: str
    key: str

    @property
    def uri(self) -> str:
        return f"{GS_SCHEME}{self.container}/{self.key}"

    def __str__(self) -> str:
        return self.uri


def parse_location(path: str) -> LockLocation:
    """Split ``gs://bucket/object/key`` into its bucket and object key.

    Only the first ``/`` after the bucket separates the two; the key keeps
    any further slashes.

    Raises:
        MalformedLocationError: If the scheme is missing, or the bucket or
            key is empty. A bare bucket cannot be a lock target.
    """
    if not path.startswith(GS_SCHEME):
        raise MalformedLocationError(path, f"location must start with {GS_SCHEME}")

    container, _, key = path[len(GS_SCHEME) :].partition("/")
    if not container:
        raise MalformedLocationError(path, "bucket name is empty")
    if not key:
        raise MalformedLocationError(path, "object key is empty")
    return LockLocation(container=container, key=key)
