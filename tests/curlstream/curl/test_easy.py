"""Tests for the single-transfer curl wrapper."""

from __future__ import annotations

from pathlib import Path

import pycurl

from curlstream.curl import CurlMulti, CurlTransfer, RequestOptions


class TestHandle:
    """Tests for easy handle setup and teardown."""

    def test_exposes_url_and_handle(self, body_file: Path) -> None:
        """The transfer keeps its URL and a live pycurl handle."""
        url = body_file.as_uri()
        transfer = CurlTransfer(url, RequestOptions(timeout_secs=5.0, headers={"X-A": "b"}))

        assert transfer.url == url
        assert isinstance(transfer.handle, pycurl.Curl)
        assert not transfer.is_closed

        transfer.close()

    def test_close_is_idempotent(self, body_file: Path) -> None:
        """Closing twice is harmless."""
        transfer = CurlTransfer(body_file.as_uri())

        transfer.close()
        transfer.close()

        assert transfer.is_closed

    def test_response_metadata_after_transfer(self, body_file: Path, body: bytes) -> None:
        """After completion the effective URL is available."""
        transfer = CurlTransfer(body_file.as_uri())
        chunks: list[bytes] = []
        transfer.set_write_handler(chunks.append)

        multi = CurlMulti([transfer])
        while multi.active_count():
            multi.run_once()

        assert b"".join(chunks) == body
        assert transfer.effective_url == body_file.as_uri()
        multi.release()

    def test_chunks_dropped_without_handler(self, body_file: Path) -> None:
        """Without a handler the body is consumed and discarded."""
        transfer = CurlTransfer(body_file.as_uri())

        multi = CurlMulti([transfer])
        while multi.active_count():
            multi.run_once()

        assert multi.active_count() == 0
        multi.release()


class TestHeaders:
    """Tests for response header collection."""

    def test_collects_headers(self, body_file: Path) -> None:
        """Header lines after the status line are split into pairs."""
        transfer = CurlTransfer(body_file.as_uri())

        for line in (
            b"HTTP/1.1 200 OK\r\n",
            b"Content-Type: text/plain\r\n",
            b"X-Spaced :  padded value \r\n",
            b"\r\n",
        ):
            transfer._on_header(line)

        assert transfer.status_line == "HTTP/1.1 200 OK"
        assert transfer.headers == [("Content-Type", "text/plain"), ("X-Spaced", "padded value")]
        transfer.close()

    def test_redirect_resets_headers(self, body_file: Path) -> None:
        """Only the final response's headers are kept."""
        transfer = CurlTransfer(body_file.as_uri())

        for line in (
            b"HTTP/1.1 302 Found\r\n",
            b"Location: /elsewhere\r\n",
            b"\r\n",
            b"HTTP/1.1 200 OK\r\n",
            b"Content-Length: 3\r\n",
            b"\r\n",
        ):
            transfer._on_header(line)

        assert transfer.status_line == "HTTP/1.1 200 OK"
        assert transfer.headers == [("Content-Length", "3")]
        transfer.close()

    def test_malformed_line_ignored(self, body_file: Path) -> None:
        """Lines without a colon are skipped."""
        transfer = CurlTransfer(body_file.as_uri())

        transfer._on_header(b"HTTP/1.1 200 OK\r\n")
        transfer._on_header(b"garbage\r\n")

        assert transfer.headers == []
        transfer.close()
