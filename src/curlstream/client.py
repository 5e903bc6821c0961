"""One-call helper for streaming a URL through libcurl."""

from __future__ import annotations

from .curl import CurlMulti, CurlTransfer, RequestOptions
from .stream import ResponseStream, StreamConfig


def open_stream(
    url: str,
    options: RequestOptions | None = None,
    *,
    config: StreamConfig | None = None,
    select_timeout_secs: float | None = None,
) -> ResponseStream:
    """
    Open a blocking read stream over the body of *url*.

    Nothing is transferred until the first read. The returned stream owns the
    transfer; close it (or use it as a context manager) to free the handles.

    Args:
        url: Any URL libcurl understands (http, https, ftp, file, ...).
        options: Request settings. Defaults to RequestOptions().
        config: Stream buffer settings.
        select_timeout_secs: Override the per-pass select wait.

    Returns:
        A ResponseStream whose ``transfer`` exposes the response metadata.
    """
    transfer = CurlTransfer(url, options)

    def factory(transfers: list[CurlTransfer]) -> CurlMulti:
        if select_timeout_secs is None:
            return CurlMulti(transfers)
        return CurlMulti(transfers, select_timeout_secs=select_timeout_secs)

    try:
        return ResponseStream.from_transfer(transfer, factory=factory, config=config)
    except BaseException:
        transfer.close()
        raise
