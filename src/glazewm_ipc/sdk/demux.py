"""Response demultiplexer.

Every inbound frame goes through route():

- event notification -> EventDispatcher
- command response   -> the most recently registered pending request
- raw frame          -> the pending request, only if exactly one is waiting

Responses carry no request id, so the protocol relies on one command being
in flight at a time (the connection serializes requests to guarantee it).
"""

from __future__ import annotations

import logging

from ..errors import CommandFailed
from ..protocol.frames import IPCEventMessage, IPCResponse, RawFrame, decode_frame
from .dispatcher import EventDispatcher
from .pending import PendingRequestTable

logger = logging.getLogger(__name__)


class ResponseDemultiplexer:
    """Route inbound frames to pending requests or event subscribers."""

    def __init__(self, pending: PendingRequestTable, dispatcher: EventDispatcher) -> None:
        self._pending = pending
        self._dispatcher = dispatcher

    def route(self, text: str) -> None:
        frame = decode_frame(text)

        if isinstance(frame, IPCEventMessage):
            logger.debug(f"Received IPC event: {frame.type}")
            self._dispatcher.dispatch(frame.type, frame.data)
        elif isinstance(frame, IPCResponse):
            self._route_response(frame)
        else:
            self._route_raw(frame)

    def _route_response(self, response: IPCResponse) -> None:
        request_id = self._pending.newest()
        if request_id is None:
            logger.debug(f"Dropping IPC response with no pending request: {response}")
            return

        logger.debug(f"Received IPC response for request {request_id}: {response}")
        if response.success:
            self._pending.resolve(request_id, response.data)
        else:
            entry = self._pending.get(request_id)
            command = entry.command if entry is not None else None
            self._pending.reject(request_id, CommandFailed(response.error, command=command))

    def _route_raw(self, frame: RawFrame) -> None:
        request_id = self._pending.sole()
        if request_id is None:
            logger.warning(
                f"Dropping undecodable frame ({len(self._pending)} pending): {frame.text[:80]!r}"
            )
            return

        logger.warning(f"Failed to parse response, resolving request {request_id} with raw data")
        self._pending.resolve(request_id, frame.value)
