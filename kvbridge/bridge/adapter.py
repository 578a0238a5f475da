"""
Storage adapter — five key-value commands over an injected store.

Every call validates its arguments, touches the store synchronously,
and hands exactly one envelope to the result channel. Outcomes travel
in the envelope; nothing is raised to the caller.

    setItem     ""/missing key or value   → invalid_param / undefined
    getItem     ""/missing key            → failed / invalid_param
                missing or empty value    → failed / undefined
    removeItem  ""/missing key            → failed / invalid_param
"""

from __future__ import annotations

import logging
from typing import Any

from kvbridge.bridge.channel import ResultChannel
from kvbridge.core.errors import StorageError
from kvbridge.core.types import INVALID_PARAM, ResultEnvelope
from kvbridge.store.capability import StorageCapability

logger = logging.getLogger(__name__)


def _blank(value: Any) -> bool:
    return not isinstance(value, str) or not value


class StorageAdapter:
    """
    Bridges callback-correlated commands to a WebStorage.

    Usage:
        adapter = StorageAdapter(StorageCapability(InMemoryStorage()), callbacks)
        adapter.set_item("a", "1", cb_id)
    """

    def __init__(
        self,
        capability: StorageCapability,
        channel: ResultChannel,
        report_unavailable: bool = False,
    ) -> None:
        self._capability = capability
        self._channel = channel
        self._report_unavailable = report_unavailable

    def _ready(self, callback_id: str) -> bool:
        if self._capability.is_available():
            return True
        logger.error("storage is not available on this host")
        if self._report_unavailable:
            self._reply(callback_id, ResultEnvelope.unavailable())
        return False

    def _reply(self, callback_id: str, envelope: ResultEnvelope) -> None:
        logger.debug(f"{callback_id} → {envelope.result.value}")
        self._channel.perform_callback(callback_id, envelope)

    # ━━━ Commands ━━━

    def set_item(self, key: str, value: str, callback_id: str) -> None:
        """Add `key`, or update its value if it already exists."""
        if not self._ready(callback_id):
            return
        if _blank(key) or _blank(value):
            self._reply(callback_id, ResultEnvelope.invalid_param())
            return
        try:
            self._capability.store.set_item(key, value)
        except Exception as e:
            # quota exhaustion and every other write fault look the same here
            logger.warning(f"Write of '{key}' failed: {e}")
            self._reply(callback_id, ResultEnvelope.failed())
            return
        self._reply(callback_id, ResultEnvelope.success())

    def get_item(self, key: str, callback_id: str) -> None:
        """Reply with the value stored under `key`."""
        if not self._ready(callback_id):
            return
        if _blank(key):
            self._reply(callback_id, ResultEnvelope.failed(INVALID_PARAM))
            return
        try:
            value = self._capability.store.get_item(key)
        except StorageError as e:
            logger.warning(f"Read of '{key}' failed: {e}")
            self._reply(callback_id, ResultEnvelope.failed())
            return
        # An empty stored value is indistinguishable from a missing one
        if value:
            self._reply(callback_id, ResultEnvelope.success(value))
        else:
            self._reply(callback_id, ResultEnvelope.failed())

    def remove_item(self, key: str, callback_id: str) -> None:
        """Remove `key`. Succeeds whether or not it existed."""
        if not self._ready(callback_id):
            return
        if _blank(key):
            self._reply(callback_id, ResultEnvelope.failed(INVALID_PARAM))
            return
        try:
            self._capability.store.remove_item(key)
        except StorageError as e:
            logger.warning(f"Removal of '{key}' failed: {e}")
            self._reply(callback_id, ResultEnvelope.failed())
            return
        self._reply(callback_id, ResultEnvelope.success())

    def length(self, callback_id: str) -> None:
        """Reply with the number of stored entries."""
        if not self._ready(callback_id):
            return
        try:
            count = self._capability.store.length
        except StorageError as e:
            logger.warning(f"Count failed: {e}")
            self._reply(callback_id, ResultEnvelope.failed())
            return
        self._reply(callback_id, ResultEnvelope.success(count))

    def get_all_keys(self, callback_id: str) -> None:
        """Reply with every key, in the store's own order."""
        if not self._ready(callback_id):
            return
        try:
            keys = self._capability.store.keys()
        except StorageError as e:
            logger.warning(f"Key enumeration failed: {e}")
            self._reply(callback_id, ResultEnvelope.failed())
            return
        self._reply(callback_id, ResultEnvelope.success(keys))
