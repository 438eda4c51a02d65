"""Transport abstraction.

A transport is a duplex text channel to one remote endpoint. It does not
interpret frames; it reports what happens to a single listener:

- on_transport_open: the channel is usable
- on_transport_message: one inbound text frame
- on_transport_error: the channel failed (while opening, or later)
- on_transport_close: the channel is gone, with the close code and reason

open() only starts the attempt. Its outcome arrives as on_transport_open
or on_transport_error, so the caller owns the timeout.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable


@runtime_checkable
class TransportListener(Protocol):
    """Receiver of transport notifications."""

    async def on_transport_open(self) -> None: ...

    async def on_transport_message(self, text: str) -> None: ...

    async def on_transport_error(self, error: BaseException) -> None: ...

    async def on_transport_close(self, code: int, reason: str) -> None: ...


@runtime_checkable
class Transport(Protocol):
    """Protocol for client transports."""

    def set_listener(self, listener: TransportListener) -> None:
        """Attach the single listener for notifications."""
        ...

    async def open(self, url: str) -> None:
        """Start connecting to `url`; the outcome is reported to the listener."""
        ...

    async def send(self, text: str) -> None:
        """Send one text frame.

        Raises:
            ConnectionError: If the channel is not open
        """
        ...

    async def close(self) -> None:
        """Close the channel. Safe to call when already closed."""
        ...


class BaseTransport(ABC):
    """Base class holding the listener and the open/closed bookkeeping."""

    def __init__(self) -> None:
        self._listener: TransportListener | None = None

    def set_listener(self, listener: TransportListener) -> None:
        self._listener = listener

    @property
    def listener(self) -> TransportListener:
        if self._listener is None:
            raise RuntimeError(f"{self.__class__.__name__} has no listener attached")
        return self._listener

    @abstractmethod
    async def open(self, url: str) -> None: ...

    @abstractmethod
    async def send(self, text: str) -> None: ...

    @abstractmethod
    async def close(self) -> None: ...
