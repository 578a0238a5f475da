"""Tests for storage detection and the availability check."""

from pathlib import Path

import pytest

from kvbridge.core.config import BridgeConfig
from kvbridge.core.errors import StorageError
from kvbridge.store.capability import StorageCapability, detect_storage
from kvbridge.store.memory import InMemoryStorage
from kvbridge.store.sqlite import SQLiteStorage


def test_capability_without_store():
    capability = StorageCapability(None)
    assert capability.is_available() is False
    with pytest.raises(StorageError):
        capability.store


@pytest.mark.parametrize("backend", ["sqlite", "memory"])
def test_capability_tracks_store_state(tmp_path: Path, backend):
    if backend == "sqlite":
        store = SQLiteStorage(tmp_path / "kv.db")
        store.initialize()
    else:
        store = InMemoryStorage()
    capability = StorageCapability(store)
    assert capability.is_available() is True

    capability.close()
    assert capability.is_available() is False


def test_detect_memory():
    config = BridgeConfig(storage={"backend": "memory", "quota_bytes": 64})
    capability = detect_storage(config)
    assert isinstance(capability.store, InMemoryStorage)
    assert capability.is_available()


def test_detect_sqlite(tmp_path: Path):
    config = BridgeConfig(storage={"backend": "sqlite", "path": str(tmp_path / "kv.db")})
    capability = detect_storage(config)
    assert isinstance(capability.store, SQLiteStorage)
    assert capability.is_available()
    capability.close()


def test_detect_none():
    capability = detect_storage(BridgeConfig(storage={"backend": "none"}))
    assert capability.is_available() is False


def test_detect_sqlite_failure_is_unavailable(tmp_path: Path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    config = BridgeConfig(storage={"backend": "sqlite", "path": str(blocker / "kv.db")})
    capability = detect_storage(config)
    assert capability.is_available() is False
