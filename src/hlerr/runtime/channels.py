"""Byte channels connecting the child's stdout/stderr to the controller.

Each channel is the parent-side read end of an OS pipe. Reads go straight to
``os.read`` so nothing is buffered at the application level.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum

from ..errors import SetupError, StreamError

__all__ = [
    "Origin",
    "Channel",
    "ChannelPair",
    "open_channel_pair",
]

logger = logging.getLogger(__name__)


class Origin(str, Enum):
    """Which child stream a byte came from."""

    STDOUT = "stdout"
    STDERR = "stderr"


class Channel:
    """Readable endpoint bound to one origin.

    Owned by exactly one component at a time and closed exactly once;
    ``close()`` on an already closed channel is a no-op.
    """

    def __init__(self, fd: int, origin: Origin) -> None:
        self._fd = fd
        self.origin = origin
        self._closed = False

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"Channel(fd={self._fd}, origin={self.origin.value}, {state})"

    @property
    def closed(self) -> bool:
        return self._closed

    def fileno(self) -> int:
        if self._closed:
            raise ValueError(f"I/O operation on closed {self.origin.value} channel")
        return self._fd

    def read_byte(self) -> int | None:
        """Read one byte.

        Returns:
            The byte value, or None at end-of-stream (zero-byte read).

        Raises:
            StreamError: If the underlying read fails
        """
        try:
            chunk = os.read(self.fileno(), 1)
        except OSError as e:
            raise StreamError(
                f"read() from {self.origin.value} pipe: {e.strerror or e}"
            ) from e
        if not chunk:
            return None
        return chunk[0]

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            os.close(self._fd)
        except OSError as e:
            logger.debug(f"close() on {self.origin.value} channel fd={self._fd} failed: {e}")


@dataclass
class ChannelPair:
    """Both ends of one pipe, tagged with the child stream it carries."""

    origin: Origin
    read_fd: int
    write_fd: int

    def reader(self) -> Channel:
        return Channel(self.read_fd, self.origin)


def open_channel_pair(origin: Origin) -> ChannelPair:
    """Create a pipe for one child stream.

    Raises:
        SetupError: If pipe() fails
    """
    try:
        read_fd, write_fd = os.pipe()
    except OSError as e:
        raise SetupError(f"pipe({origin.value}_pipe)", e) from e

    logger.debug(f"Opened {origin.value} pipe read_fd={read_fd} write_fd={write_fd}")
    return ChannelPair(origin=origin, read_fd=read_fd, write_fd=write_fd)
