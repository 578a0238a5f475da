"""
kvbridge event bus.

Carries envelopes from the bus channel to the callback registry, with
a middleware chain (the envelope journal) in front of the subscribers.
Delivery from the adapter side is always fire-and-forget.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from kvbridge.core.events import Event

logger = logging.getLogger(__name__)

EventHandler = Callable[[Event], Awaitable[None]]
MiddlewareNext = Callable[[Event], Awaitable[Event]]
MiddlewareFunc = Callable[[Event, MiddlewareNext], Awaitable[Event]]


class EventBus:
    """
    Exact-type pub/sub with a middleware pipeline.

    Usage:
        bus = EventBus()
        bus.on("storage:result", deliver)
        bus.use(envelope_logger.middleware)

        bus.emit_nowait(event)  # from synchronous code inside a running loop
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[EventHandler]] = {}
        self._middleware: list[MiddlewareFunc] = []
        self._in_flight: set[asyncio.Task] = set()

    def on(self, event_type: str, handler: EventHandler) -> None:
        self._subscribers.setdefault(event_type, []).append(handler)

    def use(self, middleware: MiddlewareFunc) -> None:
        """Add middleware. Runs in registration order before subscribers."""
        self._middleware.append(middleware)

    async def emit(self, event: Event) -> Event:
        """Run the event through middleware, then its subscribers."""
        handler: MiddlewareNext = self._dispatch
        for mw in reversed(self._middleware):

            async def wrapped(
                event: Event,
                *,
                _mw: MiddlewareFunc = mw,
                _next: MiddlewareNext = handler,
            ) -> Event:
                return await _mw(event, _next)

            handler = wrapped

        return await handler(event)

    def emit_nowait(self, event: Event) -> bool:
        """
        Schedule emission on the running loop and return immediately.

        Returns False, after logging, when there is no running loop and
        the event was dropped.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No event loop for nowait emit, dropping {event.type}")
            return False
        task = loop.create_task(self._emit_safe(event))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return True

    async def _dispatch(self, event: Event) -> Event:
        handlers = self._subscribers.get(event.type, [])
        results = await asyncio.gather(
            *(h(event) for h in handlers),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, Exception):
                logger.error(
                    f"Subscriber error for {event.type}: {result}",
                    exc_info=result,
                )
        return event

    async def _emit_safe(self, event: Event) -> None:
        try:
            await self.emit(event)
        except Exception as e:
            logger.error(f"Error in nowait emit for {event.type}: {e}")
