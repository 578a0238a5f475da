"""
Bridge — wires config, store, channel and router together.

The only object a host needs: build it from config, feed it commands,
close it on shutdown.
"""

from __future__ import annotations

import logging
from typing import Any

from kvbridge.bridge.adapter import StorageAdapter
from kvbridge.bridge.channel import BusChannel, CallbackRegistry, ResultCallback, ResultChannel
from kvbridge.bridge.commands import CommandRouter
from kvbridge.core.bus import EventBus
from kvbridge.core.config import BridgeConfig
from kvbridge.core.errors import KVBridgeError
from kvbridge.core.events import Event, EventType
from kvbridge.core.types import Command, ResultEnvelope
from kvbridge.middleware.logging import EnvelopeLogger
from kvbridge.store.capability import StorageCapability, detect_storage

logger = logging.getLogger(__name__)


class Bridge:
    """
    Storage bridge with callback delivery.

    Delivery modes (config.delivery.channel):
        direct — callbacks run synchronously inside the call
        bus    — envelopes go out as `storage:result` events and reach
                 callbacks once the running loop processes them

    Usage:
        bridge = Bridge(BridgeConfig.load(overrides={"storage": {"backend": "memory"}}))
        bridge.call("setItem", "a", "1", callback=print)
        bridge.close()
    """

    def __init__(
        self,
        config: BridgeConfig | None = None,
        capability: StorageCapability | None = None,
    ) -> None:
        self.config = config or BridgeConfig.load()
        self.bus = EventBus()
        self.callbacks = CallbackRegistry()
        self.capability = capability or detect_storage(self.config)

        channel: ResultChannel = self.callbacks
        if self.config.delivery.channel == "bus":
            channel = BusChannel(self.bus, on_drop=self.callbacks.discard)
            self.bus.on(EventType.STORAGE_RESULT, self._deliver)
            if self.config.logging.log_envelopes:
                self.bus.use(EnvelopeLogger(self.config.get_log_dir()).middleware)

        self.adapter = StorageAdapter(
            self.capability,
            channel,
            report_unavailable=self.config.delivery.unavailable == "report",
        )
        self.router = CommandRouter(self.adapter)

    def call(self, method: str, *args: Any, callback: ResultCallback) -> str:
        """Invoke a command by wire name; `callback` receives the envelope. Returns the callback id."""
        callback_id = self.callbacks.register(callback)
        try:
            self.router.dispatch(Command(method, args, callback_id))
        except KVBridgeError:
            self.callbacks.discard(callback_id)
            raise
        self._forget_if_dropped(callback_id)
        return callback_id

    def submit(self, command: Command) -> None:
        """Dispatch a prebuilt command; its callback id must already be known to the channel."""
        self.router.dispatch(command)
        self._forget_if_dropped(command.callback_id)

    def _forget_if_dropped(self, callback_id: str) -> None:
        # "drop" policy: a missing store sends nothing, so nothing will ever answer
        if self.config.delivery.unavailable == "drop" and not self.capability.is_available():
            self.callbacks.discard(callback_id)

    async def _deliver(self, event: Event) -> None:
        self.callbacks.perform_callback(
            event.data["callback_id"],
            ResultEnvelope.from_dict(event.data["envelope"]),
        )

    def close(self) -> None:
        self.capability.close()
        logger.debug("Bridge closed")

    def __enter__(self) -> Bridge:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
