"""Inbound frame decoding.

Every frame the window manager sends is one of:
- Event notification: {"type": "...", "data": ...}
- Command response:   {"success": bool, "data"?: ..., "error"?: "..."}
- Anything else (non-JSON text, non-object JSON): a raw value

Event and response share the stream, so classification happens on shape
alone: an object with both `type` and `data` and no `success` is an event.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict


class IPCEventMessage(BaseModel):
    """An unsolicited event notification."""

    type: str
    data: Any = None


class IPCResponse(BaseModel):
    """A response to the command currently awaiting its turn."""

    model_config = ConfigDict(extra="ignore")

    success: bool = False
    data: Any = None
    error: str | None = None


@dataclass
class RawFrame:
    """A frame that is not a JSON object.

    `value` is the decoded JSON value when the text parsed, otherwise the
    text itself.
    """

    text: str
    value: Any


Frame = IPCEventMessage | IPCResponse | RawFrame


def decode_frame(text: str) -> Frame:
    """Decode and classify one inbound frame."""
    try:
        message = json.loads(text)
    except (ValueError, RecursionError):
        # RecursionError: nesting deeper than the decoder allows
        return RawFrame(text=text, value=text)

    if not isinstance(message, dict):
        return RawFrame(text=text, value=message)

    if "type" in message and "data" in message and "success" not in message:
        return IPCEventMessage(type=str(message["type"]), data=message["data"])

    # `success` may come through as a non-bool; only a real true counts
    return IPCResponse(
        success=message.get("success") is True,
        data=message.get("data"),
        error=message.get("error") if isinstance(message.get("error"), str) else None,
    )
