"""
A single libcurl transfer.

CurlTransfer owns one ``pycurl.Curl`` handle. It does not perform I/O on its
own; a CurlMulti drives it. Body chunks are forwarded to whatever write
handler is registered, response headers are collected as they arrive.
"""

from __future__ import annotations

import logging

import pycurl

from ..transfer import ChunkHandler
from .options import RequestOptions

logger = logging.getLogger(__name__)


class CurlTransfer:
    """
    One easy handle configured for a single URL.

    Usage:
        transfer = CurlTransfer("https://example.org/", RequestOptions(timeout_secs=30))
        transfer.set_write_handler(chunks.append)
    """

    def __init__(self, url: str, options: RequestOptions | None = None) -> None:
        """Create and configure the easy handle."""
        self._url = url
        self._options = options or RequestOptions()
        self._write_handler: ChunkHandler | None = None
        self._status_line: str | None = None
        self._headers: list[tuple[str, str]] = []
        self._closed = False

        self._curl = pycurl.Curl()
        try:
            self._configure()
        except pycurl.error:
            self._curl.close()
            raise

    def _configure(self) -> None:
        curl = self._curl
        options = self._options

        curl.setopt(pycurl.URL, self._url)
        curl.setopt(pycurl.WRITEFUNCTION, self._on_write)
        curl.setopt(pycurl.HEADERFUNCTION, self._on_header)
        curl.setopt(pycurl.NOSIGNAL, 1)
        curl.setopt(pycurl.USERAGENT, options.user_agent)

        curl.setopt(pycurl.FOLLOWLOCATION, 1 if options.follow_redirects else 0)
        curl.setopt(pycurl.MAXREDIRS, options.max_redirects)

        if options.connect_timeout_secs is not None:
            curl.setopt(pycurl.CONNECTTIMEOUT_MS, int(options.connect_timeout_secs * 1000))
        if options.timeout_secs is not None:
            curl.setopt(pycurl.TIMEOUT_MS, int(options.timeout_secs * 1000))

        if options.headers:
            curl.setopt(pycurl.HTTPHEADER, options.header_lines())

        if not options.verify_tls:
            curl.setopt(pycurl.SSL_VERIFYPEER, 0)
            curl.setopt(pycurl.SSL_VERIFYHOST, 0)

    @property
    def url(self) -> str:
        """The requested URL."""
        return self._url

    @property
    def handle(self) -> pycurl.Curl:
        """The underlying easy handle."""
        return self._curl

    @property
    def status_line(self) -> str | None:
        """Status line of the last response, if the protocol has one."""
        return self._status_line

    @property
    def headers(self) -> list[tuple[str, str]]:
        """Headers of the last response, in arrival order."""
        return list(self._headers)

    @property
    def response_code(self) -> int:
        """Protocol response code of the last response (0 if none yet)."""
        return self._curl.getinfo(pycurl.RESPONSE_CODE)

    @property
    def effective_url(self) -> str:
        """Last URL used, after following redirects."""
        return self._curl.getinfo(pycurl.EFFECTIVE_URL)

    @property
    def is_closed(self) -> bool:
        """Whether the easy handle was closed."""
        return self._closed

    def set_write_handler(self, handler: ChunkHandler | None) -> None:
        """Route body chunks to *handler*. Chunks are dropped while it is None."""
        self._write_handler = handler

    def close(self) -> None:
        """Close the easy handle. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True
        self._write_handler = None
        self._curl.close()

    def _on_write(self, chunk: bytes) -> None:
        if self._write_handler is not None:
            self._write_handler(chunk)

    def _on_header(self, line: bytes) -> None:
        # Header bytes are ISO-8859-1 per RFC 9110.
        text = line.decode("iso-8859-1").rstrip("\r\n")
        if not text:
            return

        # A new status line starts a new response (e.g. after a redirect).
        if text.startswith("HTTP/"):
            self._status_line = text
            self._headers = []
            return

        name, sep, value = text.partition(":")
        if sep:
            self._headers.append((name.strip(), value.strip()))
        else:
            logger.debug("Ignoring malformed header line from %s: %r", self._url, text)
