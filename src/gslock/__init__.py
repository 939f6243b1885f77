"""
gslock - run a command while holding a lock object in Google Cloud Storage

Serializes cron-style and batch jobs across hosts: the guarded command runs
only after an empty marker object has been created with a
create-if-absent write, and the marker is deleted when the command exits.
"""

from gslock.core.version import __version__

__all__ = ["__version__"]
