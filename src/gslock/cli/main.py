"""CLI entrypoint: parse, lock, run, release, exit."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from typing import NoReturn

from gslock.cli.parser import build_parser, parse_arguments
from gslock.core.config import LockConfig, LogConfig
from gslock.core.constants import EXIT_FAILURE, EXIT_INTERRUPTED
from gslock.core.credentials import bootstrap_dotenv
from gslock.core.exceptions import (
    AuthError,
    ConfigurationError,
    GuardedCommandError,
    MalformedLocationError,
    StorageError,
    UsageError,
)
from gslock.core.locks import LockManager, create_lock_store
from gslock.core.logging import flush_logging_handlers, resolve_log_level, setup_logging
from gslock.location import parse_location
from gslock.runner import run_command


def _print_usage_error(parser: argparse.ArgumentParser, error: Exception) -> None:
    parser.print_usage(sys.stderr)
    print(f"gslock: error: {error}", file=sys.stderr)


def build_lock_config(args: argparse.Namespace) -> LockConfig:
    """Environment defaults overridden by explicit command-line options."""
    config = LockConfig.from_env()
    if args.poll_interval is not None:
        config.poll_interval = args.poll_interval
    if args.backend is not None:
        config.backend = args.backend
    if args.file_root is not None:
        config.file_root = args.file_root
    return config


def main(argv: Sequence[str] | None = None) -> int:
    """Run the guarded command under the lock and return the exit status.

    Usage problems and malformed locations fail before any storage call.
    Once the lock is acquired, release is attempted on every path out,
    and its outcome never changes the returned status.

    The whole run is one sequential flow on the main thread. No threads
    are started, and the storage client is only used synchronously.
    """
    parser = build_parser()
    try:
        args = parse_arguments(argv, parser)
        location = parse_location(args.location)
    except (UsageError, MalformedLocationError) as e:
        _print_usage_error(parser, e)
        return EXIT_FAILURE

    bootstrap_dotenv(logging.getLogger(__name__))
    logger = setup_logging(
        LogConfig(
            level=resolve_log_level(args.log_level),
            log_format=args.log_format,
            log_file=args.log_file,
        )
    )

    try:
        lock_config = build_lock_config(args)
        store = create_lock_store(lock_config, logger=logger)
        manager = LockManager(store, poll_interval=lock_config.poll_interval, logger=logger)
    except (AuthError, ConfigurationError) as e:
        logger.error(str(e))
        flush_logging_handlers()
        return EXIT_FAILURE

    command, command_args = args.command[0], args.command[1:]
    try:
        with manager.hold(location):
            return run_command(command, command_args)
    except StorageError as e:
        logger.error(f"Failed to acquire lock {location}: {e}")
        return EXIT_FAILURE
    except GuardedCommandError as e:
        logger.error(str(e))
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return EXIT_INTERRUPTED
    finally:
        flush_logging_handlers()


def cli() -> NoReturn:
    """Console script entry point."""
    sys.exit(main())
