"""
Blocking, forward-only read stream over an event-driven transfer engine.

The engine pushes body chunks whenever its multiplex loop runs. Callers want
the opposite: pull "up to N bytes" and block until they exist. ResponseStream
bridges the two on the caller's own thread:

    1. Chunks are appended to a growable pending buffer by a write handler.
    2. read_into() runs the engine's multiplex loop only while the buffer is
       empty and at least one transfer is still active.
    3. Buffered bytes are copied out and the remainder is compacted to the
       front of the buffer.

There is no background thread. All progress happens inside read calls, so the
write handler never runs concurrently with buffer reads.

Buffer layout::

    [ pending bytes | free capacity ]
    0              pending          capacity

Capacity starts at INITIAL_BUFFER_CAPACITY and doubles whenever an incoming
chunk would overflow it. It never shrinks.

Accounting invariant::

    length - position == pending
"""

from __future__ import annotations

import io
import logging
from collections.abc import Callable
from enum import Enum, auto
from typing import Any, Final

from pydantic import Field

from .curl import CurlMulti
from .exceptions import (
    StreamArgumentError,
    StreamDisposedError,
    StreamNotSupportedError,
    StreamRangeError,
)
from .transfer import Transfer, TransferSet
from .types import StrictBaseModel

logger = logging.getLogger(__name__)

INITIAL_BUFFER_CAPACITY: Final = 4096
"""Starting size of the pending buffer in bytes."""


class StreamConfig(StrictBaseModel):
    """Runtime configuration for a response stream."""

    initial_capacity: int = Field(default=INITIAL_BUFFER_CAPACITY, gt=0)
    """Starting size of the pending buffer in bytes."""


class StreamState(Enum):
    """Lifecycle of a response stream."""

    FRESH = auto()
    """No chunk has arrived yet."""

    ACTIVE = auto()
    """At least one chunk has arrived; more may follow."""

    DRAINED = auto()
    """Every transfer finished and the buffer is empty."""

    DISPOSED = auto()
    """The transfer set was released. Terminal."""


class ResponseStream(io.RawIOBase):
    """
    Sequential reader over the chunks delivered by a transfer set.

    The stream owns the transfer set and releases it on close(), on exiting
    a ``with`` block, or when garbage collected.

    Usage:
        with ResponseStream.from_transfer(CurlTransfer(url)) as stream:
            body = stream.read()
    """

    # Class-level default so close() is safe even if __init__ failed early.
    _transfers: TransferSet | None = None

    def __init__(
        self,
        transfers: TransferSet,
        transfer: Transfer,
        *,
        config: StreamConfig | None = None,
    ) -> None:
        """
        Take ownership of *transfers* and receive the body of *transfer*.

        Raises:
            StreamArgumentError: If either collaborator is None.
        """
        super().__init__()
        if transfers is None:
            raise StreamArgumentError("transfers must not be None")
        if transfer is None:
            raise StreamArgumentError("transfer must not be None")

        self._transfers = transfers
        self._transfer = transfer
        self._pending = 0
        self._length = 0
        self._position = 0
        self._has_data = False
        self._state = StreamState.FRESH

        # From here on the set is owned: any failure releases it.
        try:
            self._config = config or StreamConfig()
            self._buffer = bytearray(self._config.initial_capacity)
            transfer.set_write_handler(self._append)
        except BaseException:
            self.close()
            raise

    @classmethod
    def from_transfer(
        cls,
        transfer: Transfer,
        *,
        factory: Callable[[list[Any]], TransferSet] = CurlMulti,
        config: StreamConfig | None = None,
    ) -> ResponseStream:
        """
        Wrap a single transfer in a fresh single-member transfer set.

        The constructor releases the new set if attaching to *transfer* fails.
        """
        if transfer is None:
            raise StreamArgumentError("transfer must not be None")

        return cls(factory([transfer]), transfer, config=config)

    @property
    def transfer(self) -> Transfer:
        """The transfer whose body this stream reads."""
        return self._transfer

    @property
    def state(self) -> StreamState:
        """Current lifecycle state."""
        return self._state

    @property
    def length(self) -> int:
        """
        Total bytes received so far.

        This grows while transfers are running. It is only the final body
        size once the stream has drained.
        """
        return self._length

    @property
    def position(self) -> int:
        """Total bytes delivered to callers."""
        return self._position

    @position.setter
    def position(self, value: int) -> None:
        raise StreamNotSupportedError("ResponseStream does not support setting the position")

    @property
    def pending(self) -> int:
        """Bytes received but not yet read."""
        return self._pending

    @property
    def capacity(self) -> int:
        """Current size of the pending buffer."""
        return len(self._buffer)

    @property
    def has_data(self) -> bool:
        """Whether any chunk has arrived yet."""
        return self._has_data

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return False

    def writable(self) -> bool:
        return False

    def tell(self) -> int:
        self._check_disposed()
        return self._position

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        raise StreamNotSupportedError("ResponseStream does not support seeking")

    def truncate(self, size: int | None = None) -> int:
        raise StreamNotSupportedError("ResponseStream does not support truncation")

    def write(self, data: Any) -> int:
        raise StreamNotSupportedError("ResponseStream does not support writing")

    def readinto(self, buffer: Any) -> int:
        """Read up to ``len(buffer)`` bytes into *buffer*."""
        with memoryview(buffer) as view:
            if view.nbytes == 0:
                self._check_disposed()
                return 0
        return self.read_into(buffer)

    def read_into(self, buffer: Any, offset: int = 0, count: int | None = None) -> int:
        """
        Read up to *count* bytes into ``buffer[offset:]``.

        Blocks, driving the transfer set, until data is buffered or every
        transfer has finished.

        Args:
            buffer: Writable bytes-like destination, addressed in bytes
                whatever its item size.
            offset: First byte of *buffer* to fill.
            count: Maximum bytes to read. Defaults to the rest of *buffer*.

        Returns:
            Number of bytes copied. Zero means end of stream.

        Raises:
            StreamRangeError: If *offset* or *count* do not fit *buffer*.
            StreamDisposedError: If the stream was closed.
        """
        with memoryview(buffer) as source, source.cast("B") as view:
            size = len(view)
            if offset < 0 or offset >= size:
                raise StreamRangeError("offset", offset, size)
            if count is None:
                count = size - offset
            elif count < 0:
                raise StreamRangeError("count", count, size)
            elif offset + count > size:
                raise StreamRangeError("offset + count", offset + count, size)

            transfers = self._check_disposed()

            # Suspension point: engine callbacks fill the buffer from inside run_once().
            while self._pending == 0 and transfers.active_count() > 0:
                transfers.run_once()
                self._check_disposed()

            n = min(self._pending, count)
            if n == 0:
                if self._pending == 0 and self._state is not StreamState.DRAINED:
                    logger.debug("Response stream drained after %d bytes", self._length)
                    self._state = StreamState.DRAINED
                return 0

            view[offset : offset + n] = self._buffer[:n]

        remaining = self._pending - n
        if remaining > 0:
            self._buffer[:remaining] = self._buffer[n : self._pending]

        self._pending = remaining
        self._position += n
        return n

    def close(self) -> None:
        """
        Release the transfer set and dispose the stream.

        Unread bytes are discarded. Calling close() again is a no-op.
        """
        transfers, self._transfers = self._transfers, None
        try:
            if transfers is not None:
                self._state = StreamState.DISPOSED
                logger.debug(
                    "Releasing transfers after reading %d of %d bytes",
                    self._position,
                    self._length,
                )
                transfers.release()
        finally:
            super().close()

    def _check_disposed(self) -> TransferSet:
        """Return the owned transfer set, failing if it was released."""
        if self._transfers is None:
            raise StreamDisposedError("ResponseStream has been disposed")
        return self._transfers

    def _append(self, chunk: bytes) -> None:
        """Write handler: append a received chunk to the pending buffer."""
        self._check_disposed()

        required = self._pending + len(chunk)
        capacity = len(self._buffer)
        if required > capacity:
            while capacity < required:
                capacity <<= 1
            logger.debug("Growing response buffer from %d to %d bytes", len(self._buffer), capacity)
            self._buffer.extend(bytes(capacity - len(self._buffer)))

        self._buffer[self._pending : required] = chunk
        self._pending = required
        self._length += len(chunk)

        self._has_data = True
        if self._state is StreamState.FRESH:
            self._state = StreamState.ACTIVE
