"""Runtime module: child launch, stream multiplexing, rendering and reaping.

POSIX only: relies on fork/exec and poll().
"""

from __future__ import annotations

from .channels import Channel, Origin
from .launcher import LaunchedChild, launch
from .multiplexer import StreamMultiplexer
from .reaper import classify, reap, report
from .renderer import FdSink, LineBuffer, OutputMode, OutputRenderer

__all__ = [
    "Channel",
    "Origin",
    "LaunchedChild",
    "launch",
    "StreamMultiplexer",
    "classify",
    "reap",
    "report",
    "FdSink",
    "LineBuffer",
    "OutputMode",
    "OutputRenderer",
]
