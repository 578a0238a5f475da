"""
Storage capability — is there a store on this host?

Detection happens once at start-up; the adapter asks the capability
on every call, so a store that closes later is seen as unavailable.
"""

from __future__ import annotations

import logging

from kvbridge.core.config import BridgeConfig
from kvbridge.core.errors import StorageError
from kvbridge.store.base import WebStorage
from kvbridge.store.memory import InMemoryStorage
from kvbridge.store.sqlite import SQLiteStorage

logger = logging.getLogger(__name__)


class StorageCapability:
    """Wraps an optional store and answers whether it can be used."""

    def __init__(self, store: WebStorage | None = None) -> None:
        self._store = store

    def is_available(self) -> bool:
        return self._store is not None and self._store.available

    @property
    def store(self) -> WebStorage:
        if self._store is None:
            raise StorageError("No storage backend on this host")
        return self._store

    def close(self) -> None:
        if self._store is not None:
            self._store.close()


def detect_storage(config: BridgeConfig) -> StorageCapability:
    """Build the configured backend. A backend that fails to open is reported unavailable."""
    backend = config.storage.backend
    quota = config.storage.quota_bytes

    if backend == "none":
        logger.warning("Storage disabled by configuration")
        return StorageCapability(None)

    if backend == "memory":
        logger.debug("Using in-memory storage")
        return StorageCapability(InMemoryStorage(quota_bytes=quota))

    store = SQLiteStorage(config.get_storage_path(), quota_bytes=quota)
    try:
        store.initialize()
    except StorageError as e:
        logger.error(f"Storage unavailable: {e}")
        return StorageCapability(None)
    return StorageCapability(store)
