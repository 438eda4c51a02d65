"""WmClient - GlazeWM IPC client.

Typed queries, WM commands and event subscriptions over one Connection.

Usage:
    async with WmClient() as client:
        client.subscribe(WmEventType.FOCUS_CHANGED, lambda e: print(e.focused_container))

        monitors = await client.query_monitors()
        await client.run_command("focus --workspace 1")
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Iterable
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from ..config import ClientOptions
from ..errors import UnexpectedResponse, WmClientError
from ..process import ProcessCheck, is_glazewm_running
from ..protocol.commands import Command
from ..protocol.events import WmEvent, WmEventType
from ..transport.base import Transport
from .connection import (
    ConnectHandler,
    Connection,
    DisconnectHandler,
    ErrorHandler,
    TransportState,
)
from .dispatcher import EventHandler
from .types import FocusedContainer, Monitor, Window, Workspace

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class WmClient:
    """Client for the GlazeWM v3 IPC server.

    With auto-connect on (the default), constructing the client inside a
    running event loop starts connecting in the background, and requests on
    a dead connection make one connection attempt first. With it off,
    requests on a dead connection raise NotConnected.
    """

    def __init__(
        self,
        options: ClientOptions | None = None,
        *,
        transport: Transport | None = None,
        process_check: ProcessCheck | None = None,
    ) -> None:
        self.options = options or ClientOptions()
        self._connection = Connection(self.options, transport)
        self._process_check = process_check or is_glazewm_running
        self._auto_connect_task: asyncio.Task[None] | None = None

        if self.options.auto_connect:
            self._start_auto_connect()

    def _start_auto_connect(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; connecting on first request")
            return
        self._auto_connect_task = loop.create_task(self._auto_connect())

    async def _auto_connect(self) -> None:
        try:
            await self.connect()
        except WmClientError as e:
            logger.warning(f"Auto-connection failed, will connect when needed: {e}")

    @property
    def connection(self) -> Connection:
        """Access the underlying connection."""
        return self._connection

    @property
    def state(self) -> TransportState:
        return self._connection.state

    @property
    def is_connected(self) -> bool:
        return self._connection.is_connected

    # Lifecycle

    def on_connect(self, handler: ConnectHandler) -> None:
        """Register a handler called after each successful connect."""
        self._connection.on_connect(handler)

    def on_disconnect(self, handler: DisconnectHandler) -> None:
        """Register a handler called when a live connection goes away."""
        self._connection.on_disconnect(handler)

    def on_error(self, handler: ErrorHandler) -> None:
        """Register a handler called with connect failures and transport errors."""
        self._connection.on_error(handler)

    async def connect(self) -> None:
        """Connect to the GlazeWM IPC server."""
        await self._connection.connect()

    async def disconnect(self) -> None:
        """Disconnect from the GlazeWM IPC server."""
        await self._connection.disconnect()

    async def wait_until_connected(self) -> bool:
        """Wait for the background auto-connect, if any. Returns liveness."""
        if self._auto_connect_task is not None:
            await asyncio.shield(self._auto_connect_task)
        return self.is_connected

    def is_wm_running(self) -> bool:
        """Check whether the GlazeWM process is running."""
        return self._process_check()

    # Events

    def subscribe(self, kind: WmEventType | str, handler: EventHandler) -> None:
        """Subscribe to a single WM event."""
        self._connection.events.subscribe(kind, handler)

    def subscribe_many(self, kinds: Iterable[WmEventType | str], handler: EventHandler) -> None:
        """Subscribe one handler to several WM events."""
        self._connection.events.subscribe_many(kinds, handler)

    def unsubscribe(self, kind: WmEventType | str, handler: EventHandler) -> None:
        """Unsubscribe a handler from a WM event."""
        self._connection.events.unsubscribe(kind, handler)

    def unsubscribe_all(self) -> None:
        """Unsubscribe from all events."""
        self._connection.events.unsubscribe_all()

    def stream_events(self, kinds: Iterable[WmEventType | str]) -> AsyncIterator[WmEvent]:
        """Iterate over events of the given kinds as they arrive."""
        return self._connection.events.stream(kinds)

    # Requests

    async def request(self, command: Command | str) -> Any:
        """Send a raw IPC command and return the response data."""
        text = command.to_text() if isinstance(command, Command) else command
        if not self._connection.is_connected and self.options.auto_connect:
            await self._connection.connect()
        return await self._connection.request(text)

    async def query_monitors(self) -> list[Monitor]:
        command = Command.query_monitors()
        data = await self.request(command)
        return _validate(list[Monitor], _unwrap(data, "monitors"), command)

    async def query_workspaces(self) -> list[Workspace]:
        command = Command.query_workspaces()
        data = await self.request(command)
        return _validate(list[Workspace], _unwrap(data, "workspaces"), command)

    async def query_windows(self) -> list[Window]:
        command = Command.query_windows()
        data = await self.request(command)
        return _validate(list[Window], _unwrap(data, "windows"), command)

    async def query_focused(self) -> FocusedContainer:
        command = Command.query_focused()
        data = await self.request(command)
        return _validate(FocusedContainer, _unwrap(data, "focused"), command)

    async def run_command(self, command: str, subject: str | None = None) -> Any:
        """Run a WM command, optionally against a specific container id.

        Args:
            command: Command arguments, e.g. "focus --workspace 1"
            subject: Container id to run the command on
        """
        return await self.request(Command.run(command, subject))

    async def __aenter__(self) -> WmClient:
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.disconnect()


def _unwrap(data: Any, key: str) -> Any:
    # Responses either wrap the result ({"monitors": [...]}) or are the result
    if isinstance(data, dict) and key in data:
        return data[key]
    return data


def _validate(schema: Any, data: Any, command: Command) -> Any:
    try:
        return TypeAdapter(schema).validate_python(data)
    except ValidationError as e:
        raise UnexpectedResponse(f"Unexpected response to '{command}': {e}") from e
