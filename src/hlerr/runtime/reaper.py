"""Process reaper: wait for the child, classify and report its termination."""

from __future__ import annotations

import logging
import os

from ..config import SUMMARY_BEGIN_MARKER, SUMMARY_END_MARKER
from ..errors import ReapError
from ..outcome import Exited, Signaled, TerminationOutcome, Unrecognized
from ..signals import signal_name
from .renderer import Sink

__all__ = [
    "classify",
    "reap",
    "report",
    "format_summary",
]

logger = logging.getLogger(__name__)


def classify(status: int, pid: int) -> TerminationOutcome:
    """Turn a raw wait status into a TerminationOutcome.

    Args:
        status: Status word as returned by waitpid()
        pid: Child the status belongs to
    """
    if os.WIFEXITED(status):
        return Exited(code=os.WEXITSTATUS(status))
    if os.WIFSIGNALED(status):
        signum = os.WTERMSIG(status)
        return Signaled(signal_number=signum, signal_name=signal_name(signum))
    return Unrecognized(raw_status=status, pid=pid)


def reap(pid: int) -> TerminationOutcome:
    """Block until ``pid`` terminates and classify its status.

    Raises:
        ReapError: If waitpid() fails (for instance no such child)
    """
    try:
        wpid, status = os.waitpid(pid, 0)
    except OSError as e:
        raise ReapError(pid, e) from e

    outcome = classify(status, wpid)
    logger.debug(f"Reaped pid={wpid} status={status} outcome={outcome.kind.value}")
    return outcome


def format_summary(outcome: TerminationOutcome) -> bytes:
    """Summary line wrapped in the summary color, newline-terminated."""
    text = outcome.summary().encode("utf-8")
    return SUMMARY_BEGIN_MARKER + text + SUMMARY_END_MARKER + b"\n"


def report(outcome: TerminationOutcome, out: Sink, err: Sink) -> None:
    """Write the summary line.

    Unrecognized statuses go to ``err`` (the controller's own error stream),
    everything else to ``out``.
    """
    sink = err if outcome.is_error_report else out
    sink.write(format_summary(outcome))
