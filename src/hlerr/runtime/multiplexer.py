"""Stream multiplexer: the single-threaded poll loop over both channels.

Each iteration:
1. Block in poll() until at least one channel is readable, has priority
   data, or hung up
2. Abort on POLLERR / POLLNVAL
3. For each ready channel, stdout first then stderr, read exactly one byte
   and hand it to the renderer tagged with its origin
4. A zero-byte read is end-of-stream for that channel: it is unregistered
   and closed and nothing is forwarded

The loop ends once both channels have reached end-of-stream. Reading one
byte at a time keeps the rendered order equal to the order in which bytes
became readable.

EINTR from poll() and read() is retried by the interpreter (PEP 475).
"""

from __future__ import annotations

import logging
import select

from ..errors import StreamError
from .channels import Channel, Origin
from .renderer import OutputRenderer

__all__ = [
    "StreamMultiplexer",
    "READ_EVENTS",
    "ERROR_EVENTS",
]

logger = logging.getLogger(__name__)

READ_EVENTS = select.POLLIN | select.POLLPRI
ERROR_EVENTS = select.POLLERR | select.POLLNVAL
# A hung-up pipe may still hold data; read it until the zero-byte read
READY_EVENTS = READ_EVENTS | select.POLLHUP


class StreamMultiplexer:
    """Multiplex a child's stdout and stderr channels into one renderer.

    Example:
        renderer = OutputRenderer(FdSink(1))
        StreamMultiplexer(renderer).run(child.stdout, child.stderr)
        renderer.flush()

    Attributes:
        renderer: Destination for origin-tagged bytes
        iterations: Poll iterations performed by the last run
        bytes_read: Bytes forwarded per origin by the last run
    """

    def __init__(self, renderer: OutputRenderer) -> None:
        self.renderer = renderer
        self.iterations = 0
        self.bytes_read: dict[Origin, int] = {Origin.STDOUT: 0, Origin.STDERR: 0}

    def run(self, stdout: Channel, stderr: Channel) -> None:
        """Consume both channels until they are exhausted.

        Both channels are closed when this returns or raises.

        Raises:
            StreamError: On a poll error condition or a failed read/write
        """
        self.iterations = 0
        self.bytes_read = {Origin.STDOUT: 0, Origin.STDERR: 0}

        # Fixed dispatch order when both are ready in one iteration
        channels = [stdout, stderr]
        by_fd: dict[int, Channel] = {}
        poller = select.poll()

        try:
            for channel in channels:
                fd = channel.fileno()
                poller.register(fd, READ_EVENTS)
                by_fd[fd] = channel

            while True:
                try:
                    events = dict(poller.poll())
                except OSError as e:
                    raise StreamError(f"poll(): {e.strerror or e}") from e

                self.iterations += 1

                if any(revents & ERROR_EVENTS for revents in events.values()):
                    raise StreamError("stream error")

                for channel in channels:
                    if channel.closed:
                        continue
                    fd = channel.fileno()
                    if not events.get(fd, 0) & READY_EVENTS:
                        continue

                    byte = channel.read_byte()
                    if byte is None:
                        logger.debug(f"End of {channel.origin.value} stream")
                        poller.unregister(fd)
                        del by_fd[fd]
                        channel.close()
                        continue

                    self.bytes_read[channel.origin] += 1
                    self.renderer.emit(channel.origin, byte)

                if not by_fd:
                    break
        finally:
            for channel in channels:
                channel.close()

            logger.debug(
                f"Multiplexer finished: iterations={self.iterations} "
                f"stdout={self.bytes_read[Origin.STDOUT]} "
                f"stderr={self.bytes_read[Origin.STDERR]}"
            )
