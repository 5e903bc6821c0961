"""
Tests for the curl multi transfer set.

All transfers use file:// URLs so no network access is needed.
"""

from __future__ import annotations

from pathlib import Path

import pycurl
import pytest

from curlstream.curl import CurlMulti, CurlTransfer
from curlstream.exceptions import StreamDisposedError, TransferError


def _drive(multi: CurlMulti) -> None:
    while multi.active_count():
        multi.run_once()


class TestLifecycle:
    """Tests for adding, running and releasing transfers."""

    def test_empty_set_is_inactive(self) -> None:
        """A set without transfers reports nothing active."""
        multi = CurlMulti()

        assert multi.active_count() == 0
        assert len(multi) == 0
        multi.release()

    def test_added_transfer_is_active_before_first_pass(self, body_file: Path) -> None:
        """A transfer counts as active from the moment it is added."""
        multi = CurlMulti([CurlTransfer(body_file.as_uri())])

        assert multi.active_count() == 1
        assert len(multi) == 1
        multi.release()

    def test_runs_to_completion(self, body_file: Path, body: bytes) -> None:
        """Driving the set delivers the whole body and finishes."""
        transfer = CurlTransfer(body_file.as_uri())
        chunks: list[bytes] = []
        transfer.set_write_handler(chunks.append)
        multi = CurlMulti([transfer], select_timeout_secs=0.05)

        _drive(multi)

        assert b"".join(chunks) == body
        assert multi.active_count() == 0
        multi.release()

    def test_several_transfers(self, tmp_path: Path) -> None:
        """Every member transfer is serviced by the same passes."""
        bodies = {name: name.encode() * 1000 for name in ("alpha", "beta", "gamma")}
        received: dict[str, list[bytes]] = {}
        multi = CurlMulti()

        for name, content in bodies.items():
            path = tmp_path / name
            path.write_bytes(content)
            transfer = CurlTransfer(path.as_uri())
            transfer.set_write_handler(received.setdefault(name, []).append)
            multi.add(transfer)

        _drive(multi)

        assert {name: b"".join(parts) for name, parts in received.items()} == bodies
        multi.release()

    def test_release_closes_transfers(self, body_file: Path) -> None:
        """Releasing the set closes every member and is idempotent."""
        transfer = CurlTransfer(body_file.as_uri())
        multi = CurlMulti([transfer])

        multi.release()
        multi.release()

        assert multi.is_released
        assert transfer.is_closed
        assert multi.active_count() == 0

    def test_use_after_release_fails(self, body_file: Path) -> None:
        """A released set refuses further work."""
        multi = CurlMulti()
        multi.release()

        with pytest.raises(StreamDisposedError):
            multi.run_once()
        with pytest.raises(StreamDisposedError):
            multi.add(CurlTransfer(body_file.as_uri()))

    def test_select_timeout_setting(self) -> None:
        """The per-pass wait is configurable."""
        multi = CurlMulti(select_timeout_secs=0.25)

        assert multi.select_timeout_secs == 0.25
        multi.release()


class TestFailures:
    """Tests for failed transfers."""

    def test_missing_file_raises_transfer_error(self, tmp_path: Path) -> None:
        """A libcurl failure surfaces as TransferError with its code."""
        url = (tmp_path / "missing.bin").as_uri()
        multi = CurlMulti([CurlTransfer(url)])

        with pytest.raises(TransferError) as exc_info:
            _drive(multi)

        error = exc_info.value
        assert error.code == pycurl.E_FILE_COULDNT_READ_FILE
        assert error.url == url
        assert url in str(error)
        assert multi.active_count() == 0
        multi.release()

    def test_failure_does_not_stall_other_transfers(
        self, tmp_path: Path, body_file: Path, body: bytes
    ) -> None:
        """Healthy transfers can still be driven after a sibling failed."""
        good = CurlTransfer(body_file.as_uri())
        chunks: list[bytes] = []
        good.set_write_handler(chunks.append)
        bad = CurlTransfer((tmp_path / "missing.bin").as_uri())
        multi = CurlMulti([bad, good])

        failures = 0
        while multi.active_count():
            try:
                multi.run_once()
            except TransferError:
                failures += 1

        assert failures == 1
        assert b"".join(chunks) == body
        multi.release()
