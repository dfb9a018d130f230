"""Output renderer: turns origin-tagged bytes into one marked-up stream.

Rendering rules:
- stderr bytes are written immediately, preceded by the begin marker when
  the renderer is not already highlighting
- stdout bytes are line-buffered; a flush happens on newline or when the
  buffer reaches capacity, preceded by the end marker when highlighting
- ``flush()`` at the end of a run resets the mode even with an empty buffer,
  so nothing written afterwards inherits the stderr color

Every sink write is a single unit: one marker, one stderr byte or one whole
stdout block.
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from typing import Protocol

from ..config import LINE_CAPACITY, STDERR_BEGIN_MARKER, STDERR_END_MARKER
from ..errors import StreamError
from .channels import Origin

__all__ = [
    "OutputMode",
    "Sink",
    "FdSink",
    "LineBuffer",
    "OutputRenderer",
]

logger = logging.getLogger(__name__)

NEWLINE = 0x0A


class OutputMode(Enum):
    """Current highlighting state of the output stream."""

    PLAIN = "plain"
    HIGHLIGHTED = "highlighted"


class Sink(Protocol):
    """Anything that accepts bytes. ``io.BytesIO`` qualifies."""

    def write(self, data: bytes) -> object: ...


class FdSink:
    """Unbuffered sink that writes everything it is given to a descriptor.

    ``os.write`` may write less than asked for; the loop keeps going until
    the whole block is out. EINTR is retried by the interpreter.
    """

    def __init__(self, fd: int) -> None:
        self.fd = fd

    def write(self, data: bytes) -> int:
        view = memoryview(data)
        written = 0
        while written < len(view):
            try:
                written += os.write(self.fd, view[written:])
            except OSError as e:
                raise StreamError(f"write(): {e.strerror or e}") from e
        return written


class LineBuffer:
    """Fixed-capacity accumulator for stdout bytes."""

    def __init__(self, capacity: int = LINE_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._data = bytearray()

    def __len__(self) -> int:
        return len(self._data)

    @property
    def is_full(self) -> bool:
        return len(self._data) >= self.capacity

    def append(self, byte: int) -> None:
        if self.is_full:
            raise OverflowError("line buffer is full")
        self._data.append(byte)

    def drain(self) -> bytes:
        """Return the buffered bytes and clear the buffer."""
        data = bytes(self._data)
        self._data.clear()
        return data


class OutputRenderer:
    """Stateful sink for origin-tagged bytes.

    Attributes:
        sink: Where rendered bytes go
        buffer: Pending stdout bytes
        stdout_bytes / stderr_bytes: Bytes received per origin
        blocks_written: Stdout blocks flushed to the sink
        transitions: Mode changes so far
    """

    def __init__(self, sink: Sink, capacity: int = LINE_CAPACITY) -> None:
        self.sink = sink
        self.buffer = LineBuffer(capacity)
        self._mode = OutputMode.PLAIN

        self.stdout_bytes = 0
        self.stderr_bytes = 0
        self.blocks_written = 0
        self.transitions = 0

    @property
    def mode(self) -> OutputMode:
        return self._mode

    def emit(self, origin: Origin, byte: int) -> None:
        if origin is Origin.STDOUT:
            self.emit_stdout(byte)
        else:
            self.emit_stderr(byte)

    def emit_stderr(self, byte: int) -> None:
        self.stderr_bytes += 1
        self._set_mode(OutputMode.HIGHLIGHTED)
        self.sink.write(bytes((byte,)))

    def emit_stdout(self, byte: int) -> None:
        self.stdout_bytes += 1
        self.buffer.append(byte)
        if byte == NEWLINE or self.buffer.is_full:
            self._flush_line()

    def flush(self) -> None:
        """Write out pending stdout bytes and leave the stream in PLAIN mode."""
        self._flush_line()
        logger.debug(
            f"Renderer flushed: stdout_bytes={self.stdout_bytes} "
            f"stderr_bytes={self.stderr_bytes} blocks={self.blocks_written} "
            f"transitions={self.transitions}"
        )

    def _flush_line(self) -> None:
        self._set_mode(OutputMode.PLAIN)
        data = self.buffer.drain()
        if data:
            self.sink.write(data)
            self.blocks_written += 1

    def _set_mode(self, mode: OutputMode) -> None:
        if mode is self._mode:
            return
        if mode is OutputMode.HIGHLIGHTED:
            self.sink.write(STDERR_BEGIN_MARKER)
        else:
            self.sink.write(STDERR_END_MARKER)
        self._mode = mode
        self.transitions += 1
