"""WebSocket transport built on the `websockets` library.

The connection runs in one background task: connect, report
on_transport_open, then read frames until the socket closes and report
on_transport_close. Binary frames are decoded as UTF-8. If the reader
fails, the socket is closed before on_transport_close is reported.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any

import websockets

from .base import BaseTransport

logger = logging.getLogger(__name__)

ABNORMAL_CLOSURE = 1006
INTERNAL_ERROR = 1011


class WebSocketTransport(BaseTransport):
    """Transport over a single client WebSocket."""

    def __init__(
        self,
        ping_interval: float | None = 30,
        ping_timeout: float | None = 10,
    ) -> None:
        super().__init__()
        self._ping_interval = ping_interval
        self._ping_timeout = ping_timeout
        self._ws: Any = None  # websockets ClientConnection
        self._task: asyncio.Task[None] | None = None

    @property
    def is_open(self) -> bool:
        return self._ws is not None

    async def open(self, url: str) -> None:
        """Start the connection task."""
        if self._task and not self._task.done():
            raise RuntimeError("WebSocket transport is already open")
        self._task = asyncio.create_task(self._run(url))

    async def _run(self, url: str) -> None:
        listener = self.listener
        try:
            # The caller enforces its own connect timeout
            ws = await websockets.connect(
                url,
                open_timeout=None,
                ping_interval=self._ping_interval,
                ping_timeout=self._ping_timeout,
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.debug(f"WebSocket connect to {url} failed: {e}")
            await listener.on_transport_error(e)
            return

        self._ws = ws
        await listener.on_transport_open()

        try:
            async for message in ws:
                if isinstance(message, bytes):
                    message = message.decode("utf-8", errors="replace")
                await listener.on_transport_message(message)
        except websockets.ConnectionClosed:
            pass
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"WebSocket receive error: {e}")
            await ws.close(code=INTERNAL_ERROR, reason="Client reader failed")
            await listener.on_transport_error(e)
        finally:
            self._ws = None

        code = ws.close_code if ws.close_code is not None else ABNORMAL_CLOSURE
        await listener.on_transport_close(code, ws.close_reason or "")

    async def send(self, text: str) -> None:
        if not self._ws:
            raise ConnectionError("WebSocket not connected")
        await self._ws.send(text)

    async def close(self) -> None:
        """Close the socket and wait for the reader to report on_transport_close."""
        ws = self._ws
        if ws is not None:
            await ws.close()

        task = self._task
        self._task = None
        if task is None or task is asyncio.current_task():
            return
        if ws is None and not task.done():
            # Still connecting: abandon the attempt
            task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
