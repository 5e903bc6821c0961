"""Test helpers for curlstream unit tests."""

from __future__ import annotations

from collections.abc import Callable

from curlstream.stream import ResponseStream

from .mocks import Pass, ScriptedTransfer, ScriptedTransferSet

ScriptedStreamFactory = Callable[..., tuple[ResponseStream, ScriptedTransferSet]]
"""Signature of the ``make_stream`` fixture."""

__all__ = [
    "Pass",
    "ScriptedStreamFactory",
    "ScriptedTransfer",
    "ScriptedTransferSet",
]
