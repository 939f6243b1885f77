"""CLI argument parsing."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path

from gslock.core.constants import (
    BACKEND_ENV_VAR,
    CREDENTIALS_ENV_VAR,
    FILE_ROOT_ENV_VAR,
    LOG_LEVEL_ENV_VAR,
    POLL_INTERVAL_ENV_VAR,
    SUPPORTED_BACKENDS,
)
from gslock.core.exceptions import UsageError
from gslock.core.logging import VALID_LOG_FORMATS, VALID_LOG_LEVELS
from gslock.core.version import __version__


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports problems as UsageError instead of exiting with 2."""

    def error(self, message: str):
        raise UsageError(message)


def _positive_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number, got '{value}'") from None
    if not parsed > 0 or parsed == float("inf"):
        raise argparse.ArgumentTypeError(f"must be a positive number, got '{value}'")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="gslock",
        usage="gslock [options] gs://<bucket>/<object> <command> [args...]",
        description="Run a command while holding a lock object in Google Cloud Storage.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
        epilog=f"""
The lock is an empty object created only if it does not already exist.
While another holder has it, gslock polls at a fixed interval. The lock
is deleted when the command exits, and gslock exits with the command's
exit status.

Examples:
  # Nightly backup, never two at once across the fleet
  gslock gs://ops-locks/backup/nightly /usr/local/bin/backup --full

  # Poll every 5 seconds with informational logging
  gslock --poll-interval 5 --log-level INFO gs://ops-locks/reindex ./reindex.sh

  # Try it locally against a shared directory instead of GCS
  gslock --backend file --file-root /mnt/shared/locks gs://local/job make deploy

Environment:
  {CREDENTIALS_ENV_VAR}  service account JSON file (default credentials if unset)
  {POLL_INTERVAL_ENV_VAR}            default poll interval in seconds
  {BACKEND_ENV_VAR}                  lock store backend ({", ".join(SUPPORTED_BACKENDS)})
  {FILE_ROOT_ENV_VAR}                root directory for the file backend
  {LOG_LEVEL_ENV_VAR}                         default log level
""",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--poll-interval",
        type=_positive_float,
        default=None,
        metavar="SECONDS",
        help="Delay between attempts while the lock is held elsewhere (default: 1)",
    )
    parser.add_argument(
        "--backend",
        choices=SUPPORTED_BACKENDS,
        default=None,
        help="Lock store backend (default: gcs)",
    )
    parser.add_argument(
        "--file-root",
        type=Path,
        default=None,
        metavar="DIR",
        help="Root directory for the file backend",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=VALID_LOG_LEVELS,
        default=None,
        help="Logging level (default: WARNING, or LOG_LEVEL)",
    )
    parser.add_argument(
        "--log-format",
        choices=VALID_LOG_FORMATS,
        default="text",
        help="Log output format (default: text)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        metavar="PATH",
        help="Also write logs to a rotating log file",
    )
    parser.add_argument("location", nargs="?", metavar="LOCATION", help="Lock object, gs://<bucket>/<object>")
    parser.add_argument("command", nargs=argparse.REMAINDER, metavar="COMMAND", help="Command and its arguments")
    return parser


def parse_arguments(argv: Sequence[str] | None = None, parser: argparse.ArgumentParser | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Raises:
        UsageError: If the lock location or the command is missing
    """
    parser = parser or build_parser()
    args = parser.parse_args(argv)
    if not args.location:
        raise UsageError("missing lock location")
    if not args.command:
        raise UsageError("missing command to run")
    return args
