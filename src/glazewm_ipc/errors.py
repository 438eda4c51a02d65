"""Error types raised by the GlazeWM IPC client.

Every failure reaches the caller as one of these. They also derive from the
matching builtin (ConnectionError, TimeoutError, ...) so callers that only
know the standard hierarchy can still catch them.
"""

from __future__ import annotations


class WmClientError(Exception):
    """Base class for all client errors."""


class ConnectionFailed(WmClientError, ConnectionError):
    """The transport could not be opened, or opening timed out."""


class NotConnected(WmClientError, ConnectionError):
    """An operation needed a live connection and there was none."""


class ConnectionClosed(WmClientError, ConnectionError):
    """A pending request was invalidated because the connection went away."""


class RequestTimeout(WmClientError, TimeoutError):
    """No response arrived for a command within the timeout."""

    def __init__(self, command: str, elapsed: float) -> None:
        self.command = command
        self.elapsed = elapsed
        super().__init__(f"Request timeout after {round(elapsed * 1000)}ms: {command}")


class CommandFailed(WmClientError, RuntimeError):
    """The window manager answered with success=false."""

    DEFAULT_MESSAGE = "Command failed"

    def __init__(self, message: str | None = None, command: str | None = None) -> None:
        self.command = command
        super().__init__(message or self.DEFAULT_MESSAGE)


class UnexpectedResponse(WmClientError, ValueError):
    """A response payload did not have the shape the query expects."""
