"""GlazeWM IPC client.

Typed request/response and publish/subscribe API for the GlazeWM v3 IPC
server.

    from glazewm_ipc import WmClient, WmEventType

    async with WmClient() as client:
        monitors = await client.query_monitors()
"""

from .config import ClientOptions
from .errors import (
    CommandFailed,
    ConnectionClosed,
    ConnectionFailed,
    NotConnected,
    RequestTimeout,
    UnexpectedResponse,
    WmClientError,
)
from .process import is_glazewm_running
from .protocol import Command, WmEvent, WmEventType
from .sdk import (
    Connection,
    FocusedContainer,
    Monitor,
    TransportState,
    Window,
    WmClient,
    Workspace,
)

__version__ = "0.1.0"

__all__ = [
    "WmClient",
    "Connection",
    "ClientOptions",
    "TransportState",
    "Command",
    "WmEvent",
    "WmEventType",
    "Monitor",
    "Workspace",
    "Window",
    "FocusedContainer",
    "is_glazewm_running",
    "WmClientError",
    "ConnectionFailed",
    "NotConnected",
    "ConnectionClosed",
    "RequestTimeout",
    "CommandFailed",
    "UnexpectedResponse",
]
