"""Pending-request table.

Maps request ids to the futures their callers await. Each entry ends in
exactly one way: resolved, rejected, timed out, or cancelled in bulk on
disconnect. The entry is always removed before its future is completed, so
whichever path runs second finds nothing and does nothing.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from ..errors import ConnectionClosed, RequestTimeout

logger = logging.getLogger(__name__)


@dataclass
class PendingRequest:
    """A sent command waiting for its response."""

    request_id: int
    command: str
    future: asyncio.Future[Any]
    timer: asyncio.TimerHandle
    started_at: float


class PendingRequestTable:
    """Outstanding requests keyed by id, in registration order."""

    def __init__(self) -> None:
        self._entries: dict[int, PendingRequest] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, request_id: object) -> bool:
        return request_id in self._entries

    def register(self, request_id: int, command: str, timeout: float) -> asyncio.Future[Any]:
        """Track a request and start its timeout.

        Args:
            request_id: Unique id for this request
            command: Command text, reported if the request times out
            timeout: Seconds before the request fails with RequestTimeout

        Returns:
            Future completed by resolve/reject/timeout/cancel_all
        """
        if request_id in self._entries:
            raise ValueError(f"Duplicate request id: {request_id}")

        loop = asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()
        timer = loop.call_later(timeout, self._expire, request_id)
        self._entries[request_id] = PendingRequest(
            request_id=request_id,
            command=command,
            future=future,
            timer=timer,
            started_at=loop.time(),
        )
        future.add_done_callback(lambda f: self._discard(request_id, f))
        return future

    def resolve(self, request_id: int, value: Any) -> bool:
        """Complete a request with `value`. No-op if it is no longer pending."""
        entry = self._pop(request_id)
        if entry is None:
            return False
        entry.future.set_result(value)
        return True

    def reject(self, request_id: int, error: BaseException) -> bool:
        """Fail a request with `error`. No-op if it is no longer pending."""
        entry = self._pop(request_id)
        if entry is None:
            return False
        entry.future.set_exception(error)
        return True

    def cancel_all(self, reason: str = "Connection closed") -> int:
        """Fail every pending request with ConnectionClosed and clear the table."""
        entries = list(self._entries.values())
        self._entries.clear()
        for entry in entries:
            entry.timer.cancel()
            if not entry.future.done():
                entry.future.set_exception(ConnectionClosed(reason))
        if entries:
            logger.debug(f"Cancelled {len(entries)} pending request(s): {reason}")
        return len(entries)

    def get(self, request_id: int) -> PendingRequest | None:
        return self._entries.get(request_id)

    def newest(self) -> int | None:
        """Id of the most recently registered pending request."""
        return next(reversed(self._entries), None)

    def sole(self) -> int | None:
        """Id of the pending request when exactly one is outstanding."""
        if len(self._entries) != 1:
            return None
        return next(iter(self._entries))

    def _pop(self, request_id: int) -> PendingRequest | None:
        entry = self._entries.pop(request_id, None)
        if entry is None:
            return None
        entry.timer.cancel()
        if entry.future.done():
            # Caller gave up on it
            return None
        return entry

    def _expire(self, request_id: int) -> None:
        entry = self._entries.pop(request_id, None)
        if entry is None or entry.future.done():
            return
        elapsed = asyncio.get_running_loop().time() - entry.started_at
        logger.warning(
            f"Request {request_id} timed out: {entry.command}. "
            "A late response will be taken as the answer to the next request"
        )
        entry.future.set_exception(RequestTimeout(entry.command, elapsed))

    def _discard(self, request_id: int, future: asyncio.Future[Any]) -> None:
        # Runs when the future completes by any path, including caller cancellation
        entry = self._entries.get(request_id)
        if entry is not None and entry.future is future:
            del self._entries[request_id]
            entry.timer.cancel()
