"""Shared test fixtures for kvbridge."""

import pytest

from kvbridge.bridge.adapter import StorageAdapter
from kvbridge.bridge.channel import ResultChannel
from kvbridge.core.bus import EventBus
from kvbridge.core.config import BridgeConfig
from kvbridge.core.types import ResultEnvelope
from kvbridge.store.capability import StorageCapability
from kvbridge.store.memory import InMemoryStorage


class RecordingChannel(ResultChannel):
    """Collects every delivery in order."""

    def __init__(self) -> None:
        self.deliveries: list[tuple[str, ResultEnvelope]] = []

    def perform_callback(self, callback_id: str, envelope: ResultEnvelope) -> None:
        self.deliveries.append((callback_id, envelope))

    def last(self) -> dict:
        return self.deliveries[-1][1].to_dict()


@pytest.fixture
def config():
    """In-memory config that ignores files and env on disk."""
    return BridgeConfig(storage={"backend": "memory"})


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def store():
    return InMemoryStorage()


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def adapter(store, channel):
    return StorageAdapter(StorageCapability(store), channel)
