"""
Result channels — how an envelope reaches the caller.

The adapter never returns a value. It hands `(callback_id, envelope)`
to a channel and moves on.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from typing import Callable

from kvbridge.core.bus import EventBus
from kvbridge.core.events import Event, EventType
from kvbridge.core.types import ResultEnvelope

logger = logging.getLogger(__name__)

ResultCallback = Callable[[ResultEnvelope], None]


class ResultChannel(ABC):
    """Delivery primitive. Called at most once per command."""

    @abstractmethod
    def perform_callback(self, callback_id: str, envelope: ResultEnvelope) -> None:
        ...


class CallbackRegistry(ResultChannel):
    """
    Maps callback ids to callables and invokes each one once.

    Usage:
        callbacks = CallbackRegistry()
        cb_id = callbacks.register(lambda env: print(env.to_dict()))
        adapter.length(cb_id)
    """

    def __init__(self) -> None:
        self._pending: dict[str, ResultCallback] = {}

    def register(self, callback: ResultCallback, callback_id: str | None = None) -> str:
        callback_id = callback_id or uuid.uuid4().hex[:12]
        self._pending[callback_id] = callback
        return callback_id

    def discard(self, callback_id: str) -> None:
        self._pending.pop(callback_id, None)

    def perform_callback(self, callback_id: str, envelope: ResultEnvelope) -> None:
        callback = self._pending.pop(callback_id, None)
        if callback is None:
            logger.warning(f"No callback registered for {callback_id}, dropping envelope")
            return
        try:
            callback(envelope)
        except Exception as e:
            logger.error(f"Callback {callback_id} raised: {e}", exc_info=e)

    @property
    def pending(self) -> int:
        return len(self._pending)


class BusChannel(ResultChannel):
    """
    Publishes each envelope as a `storage:result` event without waiting.

    `on_drop` is told the callback id of any envelope the bus could not
    schedule (no running loop), so its owner can forget the callback.
    """

    def __init__(
        self,
        bus: EventBus,
        on_drop: Callable[[str], None] | None = None,
    ) -> None:
        self._bus = bus
        self._on_drop = on_drop

    def perform_callback(self, callback_id: str, envelope: ResultEnvelope) -> None:
        scheduled = self._bus.emit_nowait(
            Event(
                type=EventType.STORAGE_RESULT,
                data={"callback_id": callback_id, "envelope": envelope.to_dict()},
                source="storage",
            )
        )
        if not scheduled and self._on_drop is not None:
            self._on_drop(callback_id)
