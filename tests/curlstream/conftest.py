"""
Shared pytest fixtures for curlstream tests.

Provides scripted stream factories and on-disk bodies for file:// transfers.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

import pytest

from curlstream.stream import ResponseStream, StreamConfig
from tests.curlstream.helpers import (
    Pass,
    ScriptedStreamFactory,
    ScriptedTransfer,
    ScriptedTransferSet,
)


@pytest.fixture
def make_stream() -> ScriptedStreamFactory:
    """
    Factory fixture for streams over a scripted transfer set.

    Returns a callable taking the passes to replay and an optional initial
    buffer capacity, returning the stream and its transfer set.
    """

    def _make(
        passes: Iterable[Pass] = (),
        initial_capacity: int | None = None,
    ) -> tuple[ResponseStream, ScriptedTransferSet]:
        transfer = ScriptedTransfer()
        transfers = ScriptedTransferSet(transfer, passes)
        config = None
        if initial_capacity is not None:
            config = StreamConfig(initial_capacity=initial_capacity)
        return ResponseStream(transfers, transfer, config=config), transfers

    return _make


@pytest.fixture
def body() -> bytes:
    """A body large enough to arrive in several libcurl write callbacks."""
    return os.urandom(100_000)


@pytest.fixture
def body_file(tmp_path: Path, body: bytes) -> Path:
    """The ``body`` fixture written to disk."""
    path = tmp_path / "body.bin"
    path.write_bytes(body)
    return path
