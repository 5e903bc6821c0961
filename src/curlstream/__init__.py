"""
Blocking byte streams over libcurl's event-driven transfer engine.

Usage::

    from curlstream import open_stream

    with open_stream("https://example.org/data.bin") as stream:
        while chunk := stream.read(65536):
            sink.write(chunk)
"""

from .client import open_stream
from .curl import CurlMulti, CurlTransfer, RequestOptions
from .exceptions import (
    CurlStreamError,
    StreamArgumentError,
    StreamDisposedError,
    StreamNotSupportedError,
    StreamRangeError,
    TransferError,
)
from .stream import ResponseStream, StreamConfig, StreamState
from .transfer import Transfer, TransferSet

__version__ = "0.1.0"

__all__ = [
    # Core API
    "ResponseStream",
    "StreamConfig",
    "StreamState",
    "open_stream",
    # Engine seam
    "Transfer",
    "TransferSet",
    # libcurl binding
    "CurlMulti",
    "CurlTransfer",
    "RequestOptions",
    # Exceptions
    "CurlStreamError",
    "StreamArgumentError",
    "StreamDisposedError",
    "StreamNotSupportedError",
    "StreamRangeError",
    "TransferError",
]
