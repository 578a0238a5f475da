"""
Web Storage provider interface.

Synchronous string-to-string store with positional key enumeration,
shaped after the browser Storage object: get/set/remove, a `length`
count and `key(index)`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class WebStorage(ABC):
    """
    Abstract base class for storage backends.

    Implementations:
        SQLiteStorage: file-based, default
        InMemoryStorage: for testing and ephemeral hosts

    `set_item` may raise (QuotaExceededError or any StorageError);
    the other operations only raise on backend faults.
    """

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Get a value by key. Returns None if not found."""
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Set a value. Overwrites if exists."""
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove a key. No-op if absent."""
        ...

    @property
    @abstractmethod
    def length(self) -> int:
        """Number of stored entries."""
        ...

    @abstractmethod
    def key(self, index: int) -> str | None:
        """Key at position `index` in native order, None if out of range."""
        ...

    def keys(self) -> list[str]:
        """All keys in native order, i.e. key(0) .. key(length - 1)."""
        return [self.key(i) for i in range(self.length)]

    @property
    def available(self) -> bool:
        """Whether the backend can serve requests right now."""
        return True

    def close(self) -> None:
        """Release backend resources."""
        pass


def entry_size(key: str, value: str) -> int:
    """Quota accounting for one entry: characters of key plus value."""
    return len(key) + len(value)
