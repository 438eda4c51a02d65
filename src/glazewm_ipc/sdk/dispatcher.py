"""Event dispatcher - subscriber lists keyed by event kind.

Delivery order is registration order. Each subscriber call is isolated: an
exception is logged and the remaining subscribers still run.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable, Iterable
from typing import Any

from ..protocol.events import WmEvent, WmEventType, build_event, event_key
from .callbacks import CallbackGroup

logger = logging.getLogger(__name__)

EventHandler = Callable[[WmEvent], Any]


class EventDispatcher:
    """Fan out decoded events to subscribers."""

    def __init__(self) -> None:
        self._subscriptions: dict[str, CallbackGroup] = {}

    def subscribe(self, kind: WmEventType | str, handler: EventHandler) -> None:
        """Append `handler` to the subscribers of `kind`."""
        key = event_key(kind)
        if key not in self._subscriptions:
            self._subscriptions[key] = CallbackGroup(f"event:{key}")
        self._subscriptions[key].add(handler)

    def subscribe_many(self, kinds: Iterable[WmEventType | str], handler: EventHandler) -> None:
        """Subscribe the same handler to each kind in turn."""
        for kind in kinds:
            self.subscribe(kind, handler)

    def unsubscribe(self, kind: WmEventType | str, handler: EventHandler) -> None:
        """Remove the first registration of `handler` for `kind`, if any."""
        group = self._subscriptions.get(event_key(kind))
        if group is not None:
            group.remove(handler)

    def unsubscribe_all(self) -> None:
        """Remove every subscriber of every kind."""
        self._subscriptions.clear()

    def subscriber_count(self, kind: WmEventType | str) -> int:
        group = self._subscriptions.get(event_key(kind))
        return len(group) if group is not None else 0

    def dispatch(self, kind: WmEventType | str, payload: Any) -> WmEvent | None:
        """Build an event from `payload` and deliver it.

        Returns:
            The delivered event, or None when `kind` has no subscribers
        """
        key = event_key(kind)
        group = self._subscriptions.get(key)
        if group is None or len(group) == 0:
            logger.debug(f"No subscribers for event {key}")
            return None

        try:
            event = build_event(key, payload)
        except ValueError as e:
            # pydantic.ValidationError is a ValueError
            logger.warning(f"Dropping malformed {key} event: {e}")
            return None

        group.fire(event)
        return event

    async def drain(self) -> None:
        """Wait for coroutine subscribers that are still running."""
        for group in list(self._subscriptions.values()):
            await group.drain()

    async def stream(
        self,
        kinds: Iterable[WmEventType | str],
        max_queue: int = 0,
    ) -> AsyncIterator[WmEvent]:
        """Yield events of the given kinds as they are dispatched.

        Usage:
            async for event in dispatcher.stream([WmEventType.FOCUS_CHANGED]):
                print(event.focused_container)
        """
        kinds = list(kinds)
        queue: asyncio.Queue[WmEvent] = asyncio.Queue(maxsize=max_queue)

        def on_event(event: WmEvent) -> None:
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning(f"Event stream full, dropping {event_key(event.type)} event")

        self.subscribe_many(kinds, on_event)
        try:
            while True:
                yield await queue.get()
        finally:
            for kind in kinds:
                self.unsubscribe(kind, on_event)
