"""Process launcher: fork, wire the child's stdout/stderr to two pipes, exec.

Parent side:
- creates one pipe per child stream
- forks
- closes both write ends, keeping only the read ends as Channels

Child side:
- closes both read ends
- dup2()s the write ends onto fd 1 and fd 2 and closes the originals
- restores the signal dispositions the interpreter changed at startup
- execvp()s the command

The child never returns into the caller. Any failure there is reported on
its (already redirected, when possible) stderr and it leaves through
``os._exit`` with the generic failure code, so the parent observes it as an
ordinary exit.
"""

from __future__ import annotations

import logging
import os
import signal
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import NoReturn

from ..config import EXIT_FAILURE
from ..errors import SetupError
from .channels import Channel, ChannelPair, Origin, open_channel_pair

__all__ = [
    "LaunchedChild",
    "launch",
]

logger = logging.getLogger(__name__)

STDOUT_FILENO = 1
STDERR_FILENO = 2

# Signals Python sets to SIG_IGN at startup; exec would otherwise carry that
# over into the child command.
_RESTORED_SIGNALS = ("SIGPIPE", "SIGXFZ", "SIGXFSZ")


@dataclass
class LaunchedChild:
    """Handle to the single child of a run.

    Attributes:
        pid: Child process id
        stdout: Read end carrying the child's stdout
        stderr: Read end carrying the child's stderr
        argv: The command as launched
    """

    pid: int
    stdout: Channel
    stderr: Channel
    argv: list[str] = field(default_factory=list)

    def close(self) -> None:
        self.stdout.close()
        self.stderr.close()


def launch(argv: Sequence[str]) -> LaunchedChild:
    """Start ``argv`` with its stdout and stderr redirected to two pipes.

    Args:
        argv: Command line, first element is looked up on PATH

    Returns:
        LaunchedChild owning the parent-side read ends

    Raises:
        ValueError: If argv is empty
        SetupError: If a pipe cannot be created, fork fails, or the parent
            cannot close its copies of the write ends (``pid`` is set then)
    """
    if not argv:
        raise ValueError("argv must not be empty")
    argv = list(argv)

    stdout_pair = open_channel_pair(Origin.STDOUT)
    try:
        stderr_pair = open_channel_pair(Origin.STDERR)
    except SetupError:
        _close_fds(stdout_pair.read_fd, stdout_pair.write_fd)
        raise

    # Pending Python-level output would otherwise be written twice
    sys.stdout.flush()
    sys.stderr.flush()

    try:
        pid = os.fork()
    except OSError as e:
        _close_fds(
            stdout_pair.read_fd,
            stdout_pair.write_fd,
            stderr_pair.read_fd,
            stderr_pair.write_fd,
        )
        raise SetupError("fork()", e) from e

    if pid == 0:
        _run_child(argv, stdout_pair, stderr_pair)

    logger.debug(f"Started child pid={pid} argv={argv}")

    child = LaunchedChild(
        pid=pid,
        stdout=stdout_pair.reader(),
        stderr=stderr_pair.reader(),
        argv=argv,
    )

    for pair in (stdout_pair, stderr_pair):
        try:
            os.close(pair.write_fd)
        except OSError as e:
            child.close()
            raise SetupError(f"close({pair.origin.value}_pipe[1])", e, pid=pid) from e

    return child


def _run_child(
    argv: list[str],
    stdout_pair: ChannelPair,
    stderr_pair: ChannelPair,
) -> NoReturn:
    """Body of the forked child. Never returns."""
    try:
        try:
            _rebind_streams(stdout_pair, stderr_pair)
            _restore_signals()
            os.execvp(argv[0], argv)
        except SetupError as e:
            _child_error(str(e))
        except OSError as e:
            _child_error(f"Failed to execute {argv[0]!r}: {e.strerror or e}")
    finally:
        os._exit(EXIT_FAILURE)


def _rebind_streams(stdout_pair: ChannelPair, stderr_pair: ChannelPair) -> None:
    """Child side: make fd 1 / fd 2 the write ends of the two pipes."""
    for pair in (stdout_pair, stderr_pair):
        _child_step(f"close({pair.origin.value}_pipe[0])", os.close, pair.read_fd)

    for pair, target, label in (
        (stdout_pair, STDOUT_FILENO, "STDOUT"),
        (stderr_pair, STDERR_FILENO, "STDERR"),
    ):
        if pair.write_fd == target:
            # pipe() reused the descriptor because the controller started
            # without it; dup2 and close would leave the stream closed.
            # pipe() fds are non-inheritable, so exec would close it anyway.
            _child_step(f"set_inheritable() for {label}", os.set_inheritable, target, True)
            continue
        _child_step(f"dup2() for {label}", os.dup2, pair.write_fd, target)
        _child_step(f"close({pair.origin.value}_pipe[1])", os.close, pair.write_fd)


def _child_step(operation: str, func, *args) -> None:
    try:
        func(*args)
    except OSError as e:
        raise SetupError(operation, e) from e


def _restore_signals() -> None:
    for name in _RESTORED_SIGNALS:
        signum = getattr(signal, name, None)
        if signum is not None:
            signal.signal(signum, signal.SIG_DFL)


def _child_error(message: str) -> None:
    """Report a failure from the child on fd 2 without touching Python buffers."""
    data = f"{message}\n".encode("utf-8", errors="replace")
    try:
        os.write(STDERR_FILENO, data)
    except OSError:
        # Nowhere left to report to; the exit status still tells the parent
        pass


def _close_fds(*fds: int) -> None:
    for fd in fds:
        try:
            os.close(fd)
        except OSError as e:
            logger.debug(f"close() on fd={fd} failed: {e}")
