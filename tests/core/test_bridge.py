"""Tests for the Bridge composition."""

import asyncio
import json
from pathlib import Path

import pytest

from kvbridge.core.bridge import Bridge
from kvbridge.core.config import BridgeConfig
from kvbridge.core.errors import UnknownCommandError
from kvbridge.core.types import Command, Outcome, ResultEnvelope


def test_call_direct(config):
    received: list[ResultEnvelope] = []
    with Bridge(config) as bridge:
        bridge.call("setItem", "a", "1", callback=received.append)
        bridge.call("getItem", "a", callback=received.append)

    assert received[0].result is Outcome.SUCCESS
    assert received[1].data == "1"


def test_call_returns_callback_id(config):
    with Bridge(config) as bridge:
        cb_id = bridge.call("length", callback=lambda env: None)
        assert isinstance(cb_id, str) and cb_id
        assert bridge.callbacks.pending == 0


def test_call_unknown_command_discards_callback(config):
    with Bridge(config) as bridge:
        with pytest.raises(UnknownCommandError):
            bridge.call("clear", callback=lambda env: None)
        assert bridge.callbacks.pending == 0


def test_submit_prebuilt_command(config):
    received = []
    with Bridge(config) as bridge:
        bridge.callbacks.register(received.append, callback_id="host-1")
        bridge.submit(Command("setItem", ("k", "v"), "host-1"))
    assert received == [ResultEnvelope.success()]


def test_unavailable_drop_and_report():
    dropped = []
    with Bridge(BridgeConfig(storage={"backend": "none"})) as bridge:
        bridge.call("length", callback=dropped.append)
    assert dropped == []

    reported = []
    config = BridgeConfig(storage={"backend": "none"}, delivery={"unavailable": "report"})
    with Bridge(config) as bridge:
        bridge.call("length", callback=reported.append)
    assert reported == [ResultEnvelope.unavailable()]


def test_sqlite_bridge_persists(tmp_path: Path):
    config = BridgeConfig(storage={"backend": "sqlite", "path": str(tmp_path / "kv.db")})
    with Bridge(config) as bridge:
        bridge.call("setItem", "a", "1", callback=lambda env: None)

    received = []
    with Bridge(config) as bridge:
        bridge.call("getAllKeys", callback=received.append)
    assert received[0].data == ["a"]


@pytest.mark.asyncio
async def test_bus_delivery(tmp_path: Path):
    config = BridgeConfig(
        storage={"backend": "memory"},
        delivery={"channel": "bus"},
        logging={"dir": str(tmp_path / "logs"), "log_envelopes": True},
    )
    received = []
    bridge = Bridge(config)

    bridge.call("setItem", "a", "1", callback=received.append)
    bridge.call("getItem", "a", callback=received.append)
    assert received == []  # delivery is deferred to the loop

    await asyncio.sleep(0.01)
    assert [env.to_dict() for env in received] == [
        {"result": "success", "data": "undefined"},
        {"result": "success", "data": "1"},
    ]

    journal = list((tmp_path / "logs").glob("envelopes_*.jsonl"))
    assert len(journal) == 1
    lines = [json.loads(line) for line in journal[0].read_text().splitlines()]
    assert [line["envelope"]["result"] for line in lines] == ["success", "success"]
    bridge.close()


def test_dropped_calls_do_not_accumulate():
    received = []
    with Bridge(BridgeConfig(storage={"backend": "none"})) as bridge:
        for _ in range(100):
            bridge.call("length", callback=received.append)
        assert received == []
        assert bridge.callbacks.pending == 0


def test_dropped_submit_forgets_callback():
    with Bridge(BridgeConfig(storage={"backend": "none"})) as bridge:
        bridge.callbacks.register(lambda env: None, callback_id="host-1")
        bridge.submit(Command("getItem", ("k",), "host-1"))
        assert bridge.callbacks.pending == 0


def test_bus_delivery_without_loop_forgets_callback():
    config = BridgeConfig(storage={"backend": "memory"}, delivery={"channel": "bus"})
    received = []
    with Bridge(config) as bridge:
        bridge.call("length", callback=received.append)
        assert received == []
        assert bridge.callbacks.pending == 0


def test_closed_memory_bridge_is_unavailable():
    reported = []
    config = BridgeConfig(storage={"backend": "memory"}, delivery={"unavailable": "report"})
    bridge = Bridge(config)
    bridge.call("setItem", "a", "1", callback=lambda env: None)
    bridge.close()

    assert bridge.capability.is_available() is False
    bridge.call("getItem", "a", callback=reported.append)
    assert reported == [ResultEnvelope.unavailable()]


def test_closed_memory_bridge_drops_by_default(config):
    received = []
    bridge = Bridge(config)
    bridge.close()

    bridge.call("getItem", "a", callback=received.append)
    assert received == []
    assert bridge.callbacks.pending == 0
