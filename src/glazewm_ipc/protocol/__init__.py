"""Wire protocol for GlazeWM IPC.

Key concepts:
- Commands: plain-text client -> WM requests, no correlation id
- Frames: JSON WM -> client messages, either responses or events
- Correlation: by turn order, one command in flight at a time
"""

from .commands import Command, CommandType
from .events import WmEvent, WmEventType, build_event, event_key
from .frames import IPCEventMessage, IPCResponse, RawFrame, decode_frame

__all__ = [
    "Command",
    "CommandType",
    "WmEvent",
    "WmEventType",
    "build_event",
    "event_key",
    "IPCEventMessage",
    "IPCResponse",
    "RawFrame",
    "decode_frame",
]
