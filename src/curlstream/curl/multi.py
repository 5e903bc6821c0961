"""
A set of libcurl transfers driven by one multi handle.

libcurl's multi interface is readiness based: ``perform()`` does whatever
work is possible without blocking, ``select()`` waits until one of the
transfers' sockets is ready (or the timeout expires). One run_once() call is
one such round:

    1. perform until libcurl stops asking to be called again immediately,
    2. if transfers remain, wait in select for up to the configured timeout,
    3. perform again to consume whatever became ready,
    4. drain the completion queue and account for finished transfers.

Write callbacks of the member transfers run inside steps 1 and 3.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import pycurl

from .. import config
from ..exceptions import StreamDisposedError, TransferError
from .easy import CurlTransfer

logger = logging.getLogger(__name__)


class CurlMulti:
    """
    Transfer set backed by a ``pycurl.CurlMulti`` handle.

    The set owns its transfers: release() closes every easy handle too.
    """

    def __init__(
        self,
        transfers: Iterable[CurlTransfer] = (),
        *,
        select_timeout_secs: float = config.SELECT_TIMEOUT_SECS,
    ) -> None:
        """Create the multi handle and register *transfers*."""
        self._select_timeout_secs = select_timeout_secs
        self._multi: pycurl.CurlMulti | None = pycurl.CurlMulti()
        self._transfers: dict[pycurl.Curl, CurlTransfer] = {}
        self._active: set[pycurl.Curl] = set()

        for transfer in transfers:
            self.add(transfer)

    def __len__(self) -> int:
        return len(self._transfers)

    @property
    def select_timeout_secs(self) -> float:
        """Upper bound on the wait inside one run_once() call."""
        return self._select_timeout_secs

    @property
    def is_released(self) -> bool:
        """Whether release() has run."""
        return self._multi is None

    def add(self, transfer: CurlTransfer) -> None:
        """
        Register a transfer. It starts on the next run_once().

        Raises:
            StreamDisposedError: If the set was released.
        """
        multi = self._check_released()
        handle = transfer.handle
        multi.add_handle(handle)
        self._transfers[handle] = transfer
        self._active.add(handle)

    def active_count(self) -> int:
        """Number of added transfers libcurl has not reported as done."""
        return len(self._active)

    def run_once(self) -> None:
        """
        Drive all transfers through one perform/select round.

        Raises:
            StreamDisposedError: If the set was released.
            TransferError: If a transfer finished with a libcurl error.
        """
        multi = self._check_released()

        running = self._perform(multi)
        if running > 0:
            multi.select(self._select_timeout_secs)
            self._perform(multi)

        self._collect_finished(multi)

    def release(self) -> None:
        """Remove and close every transfer, then close the multi handle."""
        multi, self._multi = self._multi, None
        if multi is None:
            return

        logger.debug("Releasing %d curl transfers", len(self._transfers))
        for handle, transfer in self._transfers.items():
            # Closing an easy handle detaches it from the multi handle already.
            if not transfer.is_closed:
                multi.remove_handle(handle)
            transfer.close()

        self._transfers.clear()
        self._active.clear()
        multi.close()

    def _check_released(self) -> pycurl.CurlMulti:
        if self._multi is None:
            raise StreamDisposedError("CurlMulti has been released")
        return self._multi

    @staticmethod
    def _perform(multi: pycurl.CurlMulti) -> int:
        while True:
            ret, running = multi.perform()
            if ret != pycurl.E_CALL_MULTI_PERFORM:
                return running

    def _collect_finished(self, multi: pycurl.CurlMulti) -> None:
        # Drain the whole queue before raising so the active count stays accurate.
        failures: list[TransferError] = []
        while True:
            queued, succeeded, failed = multi.info_read()

            for handle in succeeded:
                self._active.discard(handle)
                logger.debug("Transfer of %s finished", self._transfers[handle].url)

            for handle, code, detail in failed:
                self._active.discard(handle)
                url = self._transfers[handle].url
                logger.warning("Transfer of %s failed: curl error %d: %s", url, code, detail)
                failures.append(TransferError(code, detail, url))

            if queued == 0:
                break

        if failures:
            raise failures[0]
