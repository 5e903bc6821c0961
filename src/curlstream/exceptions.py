"""Exception hierarchy for curlstream."""

from __future__ import annotations

import io


class CurlStreamError(Exception):
    """
    Base exception for all curlstream errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class StreamArgumentError(CurlStreamError, ValueError):
    """Raised when a required collaborator or argument is invalid."""


class StreamRangeError(StreamArgumentError, IndexError):
    """
    Raised when an offset or count does not fit the destination buffer.

    Attributes:
        name: The offending argument.
        value: Its value.
        buffer_length: Length of the destination buffer.
    """

    def __init__(self, name: str, value: int, buffer_length: int) -> None:
        self.name = name
        self.value = value
        self.buffer_length = buffer_length

        super().__init__(
            f"{name}={value} is out of range for a destination of {buffer_length} bytes"
        )


class StreamDisposedError(CurlStreamError, ValueError):
    """
    Raised when a stream is used after its transfers were released.

    Derives from ValueError, matching the io convention for closed files.
    """


class StreamNotSupportedError(CurlStreamError, io.UnsupportedOperation):
    """Raised for operations a forward-only, read-only stream cannot perform."""


class TransferError(CurlStreamError):
    """
    Raised when the transfer engine reports a failed transfer.

    Attributes:
        code: The libcurl error code.
        detail: libcurl's error message.
        url: The URL of the failed transfer.
    """

    def __init__(self, code: int, detail: str, url: str) -> None:
        self.code = code
        self.detail = detail
        self.url = url

        super().__init__(f"Transfer of {url} failed with curl error {code}: {detail}")
