"""
kvbridge — callback-style key-value storage bridge.

Public API:
    from kvbridge import Bridge, BridgeConfig, ResultEnvelope
"""

__version__ = "0.1.0"

# Core
from kvbridge.core.config import BridgeConfig
from kvbridge.core.types import Command, CommandSpec, Outcome, ResultEnvelope, UNDEFINED
from kvbridge.core.bridge import Bridge

# Bridge
from kvbridge.bridge.adapter import StorageAdapter
from kvbridge.bridge.channel import BusChannel, CallbackRegistry, ResultChannel
from kvbridge.bridge.commands import CommandRouter, STORAGE_COMMANDS

# Storage
from kvbridge.store.base import WebStorage
from kvbridge.store.capability import StorageCapability, detect_storage
from kvbridge.store.memory import InMemoryStorage
from kvbridge.store.sqlite import SQLiteStorage

__all__ = [
    # Core
    "Bridge",
    "BridgeConfig",
    "Command",
    "CommandSpec",
    "Outcome",
    "ResultEnvelope",
    "UNDEFINED",
    # Bridge
    "StorageAdapter",
    "BusChannel",
    "CallbackRegistry",
    "ResultChannel",
    "CommandRouter",
    "STORAGE_COMMANDS",
    # Storage
    "WebStorage",
    "StorageCapability",
    "detect_storage",
    "InMemoryStorage",
    "SQLiteStorage",
]
