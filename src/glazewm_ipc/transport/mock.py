"""In-memory transport for tests.

No I/O: opening, inbound frames and remote closes are driven by the test.

Usage:
    transport = MockTransport()
    transport.set_response("query monitors", ['{"success": true, "data": []}'])

    client = WmClient(ClientOptions(auto_connect=False), transport=transport)
    await client.connect()
    monitors = await client.query_monitors()

    assert transport.sent == ["query monitors"]
"""

from __future__ import annotations

from enum import Enum

from .base import BaseTransport

NORMAL_CLOSURE = 1000


class OpenBehavior(str, Enum):
    """What MockTransport.open() does."""

    SUCCEED = "succeed"  # report on_transport_open immediately
    FAIL = "fail"  # report on_transport_error immediately
    HANG = "hang"  # report nothing; the test drives it


class MockTransport(BaseTransport):
    """Transport double recording sent frames and replaying canned responses."""

    def __init__(
        self,
        open_behavior: OpenBehavior = OpenBehavior.SUCCEED,
        open_error: BaseException | None = None,
    ) -> None:
        super().__init__()
        self.open_behavior = open_behavior
        self.open_error = open_error or ConnectionRefusedError("Connection refused")
        self.is_open = False
        self.open_calls: list[str] = []
        self.close_calls = 0
        self._sent: list[str] = []
        self._responses: dict[str, list[str]] = {}

    @property
    def sent(self) -> list[str]:
        """Get all frames sent through this transport."""
        return self._sent.copy()

    def set_response(self, command: str, frames: list[str]) -> None:
        """Reply to `command` with `frames` as soon as it is sent."""
        self._responses[command] = frames

    def clear(self) -> None:
        self._sent.clear()
        self._responses.clear()

    async def open(self, url: str) -> None:
        self.open_calls.append(url)
        if self.open_behavior == OpenBehavior.SUCCEED:
            await self.accept()
        elif self.open_behavior == OpenBehavior.FAIL:
            await self.listener.on_transport_error(self.open_error)

    async def accept(self) -> None:
        """Complete a pending open."""
        self.is_open = True
        await self.listener.on_transport_open()

    async def send(self, text: str) -> None:
        if not self.is_open:
            raise ConnectionError("Mock transport not open")
        self._sent.append(text)
        for frame in self._responses.get(text, []):
            await self.receive(frame)

    async def receive(self, frame: str) -> None:
        """Deliver an inbound frame."""
        await self.listener.on_transport_message(frame)

    async def fail(self, error: BaseException) -> None:
        """Report a transport error."""
        await self.listener.on_transport_error(error)

    async def drop(self, code: int = 1006, reason: str = "") -> None:
        """Simulate the remote end closing the connection."""
        self.is_open = False
        await self.listener.on_transport_close(code, reason)

    async def close(self) -> None:
        self.close_calls += 1
        if self.is_open:
            self.is_open = False
            await self.listener.on_transport_close(NORMAL_CLOSURE, "")


def create_mock_transport(
    open_behavior: OpenBehavior = OpenBehavior.SUCCEED,
) -> MockTransport:
    """Create a mock transport for testing."""
    return MockTransport(open_behavior=open_behavior)
