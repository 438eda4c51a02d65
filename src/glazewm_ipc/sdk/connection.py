"""Connection lifecycle controller.

Owns one transport and everything tied to its lifetime: liveness state,
the pending-request table, the event dispatcher and the connect /
disconnect / error observers.

Guarantees:
- one connection attempt in flight at a time
- one request in flight at a time (responses are matched by turn order)
- every pending request fails with ConnectionClosed when the connection goes
- disconnect observers fire once per live -> dead transition
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

from ..config import ClientOptions
from ..errors import ConnectionClosed, ConnectionFailed, NotConnected
from ..transport.base import Transport
from ..transport.websocket import WebSocketTransport
from .callbacks import CallbackGroup
from .demux import ResponseDemultiplexer
from .dispatcher import EventDispatcher
from .pending import PendingRequestTable

logger = logging.getLogger(__name__)

ConnectHandler = Callable[[], Any]
DisconnectHandler = Callable[[], Any]
ErrorHandler = Callable[[BaseException], Any]


class TransportState(str, Enum):
    """Connection state machine."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class Connection:
    """A session with the GlazeWM IPC server.

    Usage:
        connection = Connection(ClientOptions())
        await connection.connect()
        data = await connection.request("query monitors")
        await connection.disconnect()
    """

    def __init__(self, options: ClientOptions, transport: Transport | None = None) -> None:
        self.options = options
        self._transport = transport or WebSocketTransport()
        self._transport.set_listener(self)
        self._state = TransportState.DISCONNECTED
        self._opening: asyncio.Future[None] | None = None
        self._message_id = 0
        # Bumped each time a live connection goes away
        self._session = 0

        self._pending = PendingRequestTable()
        self._dispatcher = EventDispatcher()
        self._demux = ResponseDemultiplexer(self._pending, self._dispatcher)

        self._connect_handlers = CallbackGroup("connect")
        self._disconnect_handlers = CallbackGroup("disconnect")
        self._error_handlers = CallbackGroup("error")

        self._connect_lock = asyncio.Lock()
        self._request_lock = asyncio.Lock()

    @property
    def state(self) -> TransportState:
        """Current connection state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == TransportState.CONNECTED

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def pending(self) -> PendingRequestTable:
        return self._pending

    @property
    def events(self) -> EventDispatcher:
        return self._dispatcher

    # Observers

    def on_connect(self, handler: ConnectHandler) -> None:
        self._connect_handlers.add(handler)

    def on_disconnect(self, handler: DisconnectHandler) -> None:
        self._disconnect_handlers.add(handler)

    def on_error(self, handler: ErrorHandler) -> None:
        self._error_handlers.add(handler)

    # Lifecycle

    async def connect(self) -> None:
        """Open the transport, or return at once if already connected.

        Raises:
            ConnectionFailed: If the transport reports an error, closes before
                opening, or does not open within the timeout
        """
        async with self._connect_lock:
            if self._state == TransportState.CONNECTED:
                return

            self._state = TransportState.CONNECTING
            self._opening = asyncio.get_running_loop().create_future()
            logger.info(f"Connecting to GlazeWM IPC on port {self.options.port}...")

            try:
                await self._transport.open(self.options.url)
                await asyncio.wait_for(self._opening, timeout=self.options.timeout)
            except TimeoutError:
                self._state = TransportState.DISCONNECTED
                error = ConnectionFailed(
                    "Connection timeout - make sure GlazeWM is running and IPC is enabled"
                )
                logger.error(str(error))
                self._error_handlers.fire(error)
                await self._transport.close()
                raise error from None
            except BaseException:
                self._state = TransportState.DISCONNECTED
                raise
            finally:
                self._opening = None

            if self._state != TransportState.CONNECTED:
                raise ConnectionFailed("Connection closed during handshake")

            logger.info("Connected to GlazeWM IPC")
            self._connect_handlers.fire()

    async def disconnect(self) -> None:
        """Close the connection and fail all pending requests. Idempotent."""
        was_live = self._state == TransportState.CONNECTED
        was_opening = self._state == TransportState.CONNECTING

        if self._opening is not None and not self._opening.done():
            self._opening.set_exception(ConnectionFailed("Disconnected while connecting"))

        self._state = TransportState.DISCONNECTED
        if was_live:
            self._session += 1
        try:
            if was_live or was_opening:
                await self._transport.close()
        finally:
            if was_live:
                logger.info("Disconnected from GlazeWM IPC")
                self._disconnect_handlers.fire()
            self._pending.cancel_all("Connection closed")

    async def request(self, command: str) -> Any:
        """Send a command and wait for its response.

        Requests are serialized: a command is only written once the previous
        one has been answered, failed or timed out. Responses carry no id, so
        a response that arrives after its request timed out is taken as the
        answer to the next request. Treat a RequestTimeout as a sign the
        stream may be out of step, and reconnect if later answers look wrong.

        Returns:
            The response `data`, or the raw frame if it was not a JSON object

        Raises:
            NotConnected: If the connection is not live when called
            RequestTimeout: If no response arrives within the timeout
            CommandFailed: If the window manager reports failure
            ConnectionClosed: If the connection goes away first, including
                while the request is still queued behind another one
        """
        if self._state != TransportState.CONNECTED:
            raise NotConnected("Not connected to GlazeWM IPC")
        session = self._session

        async with self._request_lock:
            if self._session != session or self._state != TransportState.CONNECTED:
                raise ConnectionClosed("Connection closed")

            self._message_id += 1
            request_id = self._message_id
            future = self._pending.register(request_id, command, self.options.timeout)

            logger.debug(f"Sending IPC command: {command}")
            try:
                await self._transport.send(command)
            except Exception as e:
                error = ConnectionClosed(f"Failed to send '{command}': {e}")
                error.__cause__ = e
                self._pending.reject(request_id, error)

            return await future

    async def drain(self) -> None:
        """Wait for observer and subscriber coroutines that are still running."""
        for group in (self._connect_handlers, self._disconnect_handlers, self._error_handlers):
            await group.drain()
        await self._dispatcher.drain()

    # TransportListener

    async def on_transport_open(self) -> None:
        if self._opening is None or self._opening.done():
            logger.debug("Ignoring open notification with no connect in progress")
            return
        self._state = TransportState.CONNECTED
        self._opening.set_result(None)

    async def on_transport_message(self, text: str) -> None:
        self._demux.route(text)

    async def on_transport_error(self, error: BaseException) -> None:
        if self._opening is not None and not self._opening.done():
            failure = ConnectionFailed(f"Failed to connect to GlazeWM IPC: {error}")
            failure.__cause__ = error
            logger.error(str(failure))
            self._error_handlers.fire(failure)
            self._opening.set_exception(failure)
            return

        logger.error(f"WebSocket error: {error}")
        self._error_handlers.fire(error)

    async def on_transport_close(self, code: int, reason: str) -> None:
        logger.info(f"WebSocket connection closed (code: {code}, reason: {reason})")

        if self._opening is not None and not self._opening.done():
            failure = ConnectionFailed(f"Connection closed before it opened (code: {code})")
            self._error_handlers.fire(failure)
            self._opening.set_exception(failure)
            return

        if self._state == TransportState.CONNECTED:
            self._state = TransportState.DISCONNECTED
            self._session += 1
            self._disconnect_handlers.fire()

        self._pending.cancel_all("Connection closed")

    async def __aenter__(self) -> Connection:
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.disconnect()
