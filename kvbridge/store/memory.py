"""
In-memory storage backend.

Dict-based; enumeration follows insertion order and an overwrite keeps
the key's original position. Data is lost when the process exits, and
a closed store reports itself unavailable.
"""

from __future__ import annotations

from kvbridge.core.errors import QuotaExceededError
from kvbridge.store.base import WebStorage, entry_size


class InMemoryStorage(WebStorage):
    """
    In-memory key-value store.

    Usage:
        storage = InMemoryStorage(quota_bytes=1024)
        storage.set_item("key", "value")
        assert storage.get_item("key") == "value"
    """

    def __init__(self, quota_bytes: int | None = None) -> None:
        self._data: dict[str, str] = {}
        self._quota = quota_bytes
        self._used = 0
        self._closed = False
        # Key order snapshot for key(index); rebuilt after inserts/removals
        self._order: list[str] | None = None

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        previous = self._data.get(key)
        freed = entry_size(key, previous) if previous is not None else 0
        used = self._used - freed + entry_size(key, value)
        if self._quota is not None and used > self._quota:
            raise QuotaExceededError(
                f"Setting '{key}' exceeds the {self._quota} byte quota",
                quota=self._quota,
                requested=used,
            )
        if previous is None:
            self._order = None
        self._data[key] = value
        self._used = used

    def remove_item(self, key: str) -> None:
        value = self._data.pop(key, None)
        if value is not None:
            self._used -= entry_size(key, value)
            self._order = None

    @property
    def length(self) -> int:
        return len(self._data)

    def key(self, index: int) -> str | None:
        if self._order is None:
            self._order = list(self._data)
        if 0 <= index < len(self._order):
            return self._order[index]
        return None

    @property
    def used_bytes(self) -> int:
        return self._used

    @property
    def available(self) -> bool:
        return not self._closed

    def close(self) -> None:
        self._data.clear()
        self._order = None
        self._used = 0
        self._closed = True
