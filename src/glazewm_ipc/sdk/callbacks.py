"""Guarded callback lists.

Used for connect/disconnect/error observers and for event subscribers.
Handlers may be plain callables or coroutine functions. Plain handlers run
inline in registration order. Coroutines are scheduled as tasks in the same
order, so a handler can await client requests without stalling the reader
that delivers their responses. A failing handler is logged and never stops
the others.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable, Iterator
from typing import Any

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


class CallbackGroup:
    """Ordered list of handlers fired together."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._handlers: list[Handler] = []
        self._tasks: set[asyncio.Task[Any]] = set()

    def __len__(self) -> int:
        return len(self._handlers)

    def __iter__(self) -> Iterator[Handler]:
        return iter(list(self._handlers))

    def __contains__(self, handler: object) -> bool:
        return handler in self._handlers

    def add(self, handler: Handler) -> None:
        self._handlers.append(handler)

    def remove(self, handler: Handler) -> bool:
        """Remove the first handler equal to `handler`."""
        try:
            self._handlers.remove(handler)
        except ValueError:
            return False
        return True

    def clear(self) -> None:
        self._handlers.clear()

    def fire(self, *args: Any) -> int:
        """Invoke every handler with `args`. Returns how many were invoked."""
        # Copy so handlers can unsubscribe themselves mid-dispatch
        handlers = list(self._handlers)
        for handler in handlers:
            try:
                result = handler(*args)
            except Exception:
                logger.exception(f"Error in {self.name} handler")
                continue
            if inspect.isawaitable(result):
                self._track(result)
        return len(handlers)

    def _track(self, awaitable: Any) -> None:
        task = asyncio.ensure_future(awaitable)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                f"Error in {self.name} handler",
                exc_info=(type(error), error, error.__traceback__),
            )

    async def drain(self) -> None:
        """Wait for scheduled coroutine handlers to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
