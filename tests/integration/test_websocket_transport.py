"""Integration tests against a local WebSocket server.

A small stand-in for the GlazeWM IPC server answers a few commands so the
real WebSocketTransport can be exercised end to end.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
import websockets

from glazewm_ipc.config import ClientOptions
from glazewm_ipc.errors import CommandFailed, ConnectionClosed, ConnectionFailed
from glazewm_ipc.protocol.events import WmEvent
from glazewm_ipc.sdk.client import WmClient
from glazewm_ipc.sdk.connection import TransportState
from glazewm_ipc.transport.websocket import WebSocketTransport

HOST = "127.0.0.1"

MONITOR = {
    "id": "m1",
    "name": "DISPLAY1",
    "width": 2560,
    "height": 1440,
    "x": 0,
    "y": 0,
    "isPrimary": True,
}


DEEPLY_NESTED = "[" * 200_000


async def fake_glazewm(ws) -> None:
    async for message in ws:
        if message == "query monitors":
            await ws.send(json.dumps({"success": True, "data": {"monitors": [MONITOR]}}))
        elif message == "command focus --next":
            await ws.send(
                json.dumps({"type": "focus_changed", "data": {"focusedContainer": {"id": "w2"}}})
            )
            await ws.send(json.dumps({"success": True, "data": None}))
        elif message == "command nest":
            await ws.send(DEEPLY_NESTED)
        elif message == "command shutdown":
            await ws.close()
        else:
            await ws.send(json.dumps({"success": False, "error": f"Unknown command: {message}"}))


@pytest_asyncio.fixture
async def server_port() -> AsyncIterator[int]:
    async with websockets.serve(fake_glazewm, HOST, 0) as server:
        yield server.sockets[0].getsockname()[1]


def make_client(port: int) -> WmClient:
    return WmClient(ClientOptions(host=HOST, port=port, timeout=2.0, auto_connect=False))


class TestWebSocketTransport:
    """End-to-end tests over a real socket."""

    @pytest.mark.asyncio
    async def test_query(self, server_port: int) -> None:
        async with make_client(server_port) as client:
            monitors = await client.query_monitors()

        assert [m.id for m in monitors] == ["m1"]
        assert monitors[0].width == 2560

    @pytest.mark.asyncio
    async def test_error_response(self, server_port: int) -> None:
        async with make_client(server_port) as client:
            with pytest.raises(CommandFailed, match="Unknown command"):
                await client.run_command("bogus")

            # The connection stays usable
            assert len(await client.query_monitors()) == 1

    @pytest.mark.asyncio
    async def test_event_before_response(self, server_port: int) -> None:
        received: list[WmEvent] = []

        async with make_client(server_port) as client:
            client.subscribe("focus_changed", received.append)
            result = await client.run_command("focus --next")

        assert result is None
        assert received[0].focused_container == {"id": "w2"}

    @pytest.mark.asyncio
    async def test_server_close(self, server_port: int) -> None:
        """A server-side close fails the request and fires on_disconnect."""
        client = make_client(server_port)
        disconnected = asyncio.Event()
        client.on_disconnect(disconnected.set)
        await client.connect()

        with pytest.raises(ConnectionClosed):
            await client.run_command("shutdown")

        await asyncio.wait_for(disconnected.wait(), timeout=2.0)
        assert client.state == TransportState.DISCONNECTED
        await client.disconnect()

    @pytest.mark.asyncio
    async def test_connect_refused(self) -> None:
        """Connecting to a port nobody listens on fails with ConnectionFailed."""
        async with websockets.serve(fake_glazewm, HOST, 0) as server:
            port = server.sockets[0].getsockname()[1]

        errors: list[BaseException] = []
        client = make_client(port)
        client.on_error(errors.append)

        with pytest.raises(ConnectionFailed):
            await client.connect()

        assert len(errors) == 1
        assert not client.is_connected

    @pytest.mark.asyncio
    async def test_deeply_nested_reply_is_raw(self, server_port: int) -> None:
        """An undecodable reply answers the request and keeps the connection up."""
        async with make_client(server_port) as client:
            result = await client.request("command nest")

            assert result == DEEPLY_NESTED
            assert client.is_connected
            assert len(await client.query_monitors()) == 1


class RecordingListener:
    """Listener that fails on every inbound frame."""

    def __init__(self) -> None:
        self.errors: list[BaseException] = []
        self.close_codes: list[int] = []
        self.closed = asyncio.Event()

    async def on_transport_open(self) -> None:
        pass

    async def on_transport_message(self, text: str) -> None:
        raise RuntimeError("listener failed")

    async def on_transport_error(self, error: BaseException) -> None:
        self.errors.append(error)

    async def on_transport_close(self, code: int, reason: str) -> None:
        self.close_codes.append(code)
        self.closed.set()


class TestReaderFailure:
    """Tests for the transport's own reader task."""

    @pytest.mark.asyncio
    async def test_reader_failure_closes_socket(self) -> None:
        """If frame handling fails, the socket is closed, not left open."""
        server_saw_close = asyncio.Event()

        async def greet(ws) -> None:
            await ws.send("hello")
            await ws.wait_closed()
            server_saw_close.set()

        listener = RecordingListener()
        transport = WebSocketTransport()
        transport.set_listener(listener)

        async with websockets.serve(greet, HOST, 0) as server:
            port = server.sockets[0].getsockname()[1]
            await transport.open(f"ws://{HOST}:{port}")

            await asyncio.wait_for(listener.closed.wait(), timeout=2.0)
            await asyncio.wait_for(server_saw_close.wait(), timeout=2.0)

        assert len(listener.errors) == 1
        assert isinstance(listener.errors[0], RuntimeError)
        assert len(listener.close_codes) == 1
        assert not transport.is_open
        await transport.close()
