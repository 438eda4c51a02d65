"""Transport layer.

Provides the duplex text channel the connection runs over:
- WebSocket - the GlazeWM IPC server's native transport
- Mock - in-memory, for tests
"""

from .base import BaseTransport, Transport, TransportListener
from .mock import MockTransport, OpenBehavior, create_mock_transport
from .websocket import WebSocketTransport

__all__ = [
    "BaseTransport",
    "Transport",
    "TransportListener",
    "WebSocketTransport",
    "MockTransport",
    "OpenBehavior",
    "create_mock_transport",
]
