"""
Structural interfaces between the response stream and a transfer engine.

The stream never performs I/O itself. It consumes four primitives:

    - Transfer.set_write_handler: receive each chunk as it arrives.
    - TransferSet.active_count: how many transfers are still running.
    - TransferSet.run_once: one readiness-multiplexed I/O pass.
    - TransferSet.release: tear down every transfer in the set.

Any engine exposing these shapes can back a ResponseStream.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

ChunkHandler = Callable[[bytes], None]
"""Callback invoked synchronously with each received chunk."""


@runtime_checkable
class Transfer(Protocol):
    """A single in-flight transfer that delivers its body in chunks."""

    def set_write_handler(self, handler: ChunkHandler | None) -> None:
        """Route received chunks to *handler*."""
        ...


@runtime_checkable
class TransferSet(Protocol):
    """An aggregate of transfers driven by one multiplex loop."""

    def active_count(self) -> int:
        """Number of transfers that have not finished yet."""
        ...

    def run_once(self) -> None:
        """
        Service all registered transfers once.

        May block up to the engine's internal timeout. Write handlers are
        invoked from inside this call.
        """
        ...

    def release(self) -> None:
        """Free every underlying transfer. Must be idempotent."""
        ...
