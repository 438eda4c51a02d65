"""Event definitions for window-manager notifications.

Events are built client-side from an inbound {"type", "data"} frame: the
payload fields are spread onto the event alongside `type` and a capture
`timestamp` (milliseconds since the epoch, local clock).

Known kinds get a typed model. Payload keys stay camelCase on the wire and
are readable under snake_case names too:

    event.focusedContainer == event.focused_container
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WmEventType(str, Enum):
    """All event kinds GlazeWM publishes."""

    FOCUS_CHANGED = "focus_changed"
    WORKSPACE_ACTIVATED = "workspace_activated"
    WORKSPACE_DEACTIVATED = "workspace_deactivated"
    WINDOW_MANAGED = "window_managed"
    WINDOW_UNMANAGED = "window_unmanaged"
    MONITOR_ADDED = "monitor_added"
    MONITOR_REMOVED = "monitor_removed"


def event_key(kind: WmEventType | str) -> str:
    """Normalize an event kind to its wire string."""
    return kind.value if isinstance(kind, WmEventType) else str(kind)


def now_ms() -> int:
    return int(time.time() * 1000)


class WmEvent(BaseModel):
    """A decoded event notification."""

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    type: WmEventType | str = Field(union_mode="left_to_right")
    timestamp: int = Field(default_factory=now_ms)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            return super().__getattr__(name)
        for field_name, info in type(self).model_fields.items():
            if info.alias == name:
                return getattr(self, field_name)
        # Extra payload fields are only stored under their wire names
        extra = self.__pydantic_extra__ or {}
        if name in extra:
            return extra[name]
        camel = to_camel(name)
        if camel in extra:
            return extra[camel]
        return super().__getattr__(name)


class FocusChangedEvent(WmEvent):
    focused_container: Any = None
    previous_container: Any = None


class WorkspaceActivatedEvent(WmEvent):
    activated_workspace: Any = None


class WorkspaceDeactivatedEvent(WmEvent):
    deactivated_workspace: Any = None


class WindowManagedEvent(WmEvent):
    managed_window: Any = None


class WindowUnmanagedEvent(WmEvent):
    unmanaged_window: Any = None


class MonitorAddedEvent(WmEvent):
    added_monitor: Any = None


class MonitorRemovedEvent(WmEvent):
    removed_monitor: Any = None


EVENT_MODELS: dict[str, type[WmEvent]] = {
    WmEventType.FOCUS_CHANGED.value: FocusChangedEvent,
    WmEventType.WORKSPACE_ACTIVATED.value: WorkspaceActivatedEvent,
    WmEventType.WORKSPACE_DEACTIVATED.value: WorkspaceDeactivatedEvent,
    WmEventType.WINDOW_MANAGED.value: WindowManagedEvent,
    WmEventType.WINDOW_UNMANAGED.value: WindowUnmanagedEvent,
    WmEventType.MONITOR_ADDED.value: MonitorAddedEvent,
    WmEventType.MONITOR_REMOVED.value: MonitorRemovedEvent,
}


def build_event(kind: WmEventType | str, payload: Any, timestamp: int | None = None) -> WmEvent:
    """Tag a payload with its kind and capture time.

    A payload that is not an object is kept under `data`.
    """
    key = event_key(kind)
    fields = dict(payload) if isinstance(payload, dict) else {"data": payload}
    # Payload cannot override the envelope
    fields.pop("type", None)
    fields.pop("timestamp", None)
    model = EVENT_MODELS.get(key, WmEvent)
    return model.model_validate(
        {**fields, "type": key, "timestamp": timestamp if timestamp is not None else now_ms()}
    )
