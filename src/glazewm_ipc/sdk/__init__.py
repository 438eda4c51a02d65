"""GlazeWM IPC SDK.

Layers, leaves first:
- PendingRequestTable: futures for commands awaiting a response
- EventDispatcher: ordered subscriber lists per event kind
- ResponseDemultiplexer: routes each inbound frame to one of the above
- Connection: lifecycle, timeouts, observers, bulk cancellation
- WmClient: typed queries and commands (recommended entry point)
"""

from .client import WmClient
from .connection import Connection, TransportState
from .demux import ResponseDemultiplexer
from .dispatcher import EventDispatcher, EventHandler
from .pending import PendingRequest, PendingRequestTable
from .types import FocusedContainer, Monitor, Window, Workspace

__all__ = [
    # Client (recommended)
    "WmClient",
    # Core
    "Connection",
    "TransportState",
    "PendingRequest",
    "PendingRequestTable",
    "ResponseDemultiplexer",
    "EventDispatcher",
    "EventHandler",
    # Types
    "Monitor",
    "Workspace",
    "Window",
    "FocusedContainer",
]
