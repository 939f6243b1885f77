"""Guarded command execution."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence

from gslock.core.constants import SIGNAL_EXIT_BASE
from gslock.core.exceptions import GuardedCommandError

logger = logging.getLogger(__name__)


def exit_code_from_returncode(returncode: int) -> int:
    """Map a ``Popen.returncode`` to a shell-style exit status.

    A negative returncode means the child was killed by that signal;
    report it as 128 + signal number, the way a POSIX shell does.
    """
    if returncode < 0:
        return SIGNAL_EXIT_BASE + (-returncode)
    return returncode


def _wait_through_interrupts(proc: subprocess.Popen) -> int:
    while True:
        try:
            return proc.wait()
        except KeyboardInterrupt:
            logger.warning("Still waiting for the guarded command to exit")


def run_command(command: str, args: Sequence[str] = ()) -> int:
    """Run ``command`` with ``args`` and wait for it to exit.

    The child inherits this process's stdin, stdout and stderr unchanged.

    Returns:
        The child's exit status (see ``exit_code_from_returncode``)

    Raises:
        GuardedCommandError: If the command cannot be started
    """
    argv = [command, *args]
    logger.debug(f"Running guarded command: {argv!r}")
    try:
        proc = subprocess.Popen(argv)
    except (OSError, ValueError) as e:
        raise GuardedCommandError(command, details=str(e), original_error=e) from e

    try:
        returncode = proc.wait()
    except KeyboardInterrupt:
        # The child is in our process group and got the same SIGINT. The
        # lock must stay held until it has actually exited, however many
        # times Ctrl-C is pressed meanwhile.
        _wait_through_interrupts(proc)
        raise

    exit_code = exit_code_from_returncode(returncode)
    if returncode < 0:
        logger.warning(f"Guarded command '{command}' was terminated by signal {-returncode}")
    else:
        logger.debug(f"Guarded command '{command}' exited with status {exit_code}")
    return exit_code
