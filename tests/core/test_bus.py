"""Tests for the Event Bus."""

import asyncio

import pytest

from kvbridge.core.bus import EventBus
from kvbridge.core.events import Event, EventType


@pytest.mark.asyncio
async def test_emit_and_subscribe(bus: EventBus):
    received = []

    async def handler(event: Event):
        received.append(event)

    bus.on(EventType.STORAGE_RESULT, handler)
    await bus.emit(Event(type=EventType.STORAGE_RESULT, data={"callback_id": "cb1"}))

    assert len(received) == 1
    assert received[0].data == {"callback_id": "cb1"}


@pytest.mark.asyncio
async def test_only_matching_type_delivered(bus: EventBus):
    received = []

    async def handler(event: Event):
        received.append(event.type)

    bus.on(EventType.STORAGE_RESULT, handler)
    await bus.emit(Event(type=EventType.STORAGE_RESULT))
    await bus.emit(Event(type="other:thing"))

    assert received == [EventType.STORAGE_RESULT]


@pytest.mark.asyncio
async def test_middleware_runs_in_order(bus: EventBus):
    order = []

    async def first(event, next_handler):
        order.append("first")
        return await next_handler(event)

    async def second(event, next_handler):
        order.append("second")
        return await next_handler(event)

    async def handler(event):
        order.append("handler")

    bus.use(first)
    bus.use(second)
    bus.on(EventType.STORAGE_RESULT, handler)
    await bus.emit(Event(type=EventType.STORAGE_RESULT))

    assert order == ["first", "second", "handler"]


@pytest.mark.asyncio
async def test_middleware_sees_events_without_subscribers(bus: EventBus):
    seen = []

    async def tap(event, next_handler):
        seen.append(event.type)
        return await next_handler(event)

    bus.use(tap)
    await bus.emit(Event(type=EventType.STORAGE_RESULT))

    assert seen == [EventType.STORAGE_RESULT]


@pytest.mark.asyncio
async def test_subscriber_error_does_not_propagate(bus: EventBus):
    received = []

    async def broken(event):
        raise RuntimeError("boom")

    async def healthy(event):
        received.append(event)

    bus.on(EventType.STORAGE_RESULT, broken)
    bus.on(EventType.STORAGE_RESULT, healthy)
    await bus.emit(Event(type=EventType.STORAGE_RESULT))

    assert len(received) == 1


@pytest.mark.asyncio
async def test_emit_nowait_delivers_later(bus: EventBus):
    received = []

    async def handler(event):
        received.append(event)

    bus.on(EventType.STORAGE_RESULT, handler)
    assert bus.emit_nowait(Event(type=EventType.STORAGE_RESULT)) is True
    assert received == []

    await asyncio.sleep(0.01)
    assert len(received) == 1


def test_emit_nowait_without_loop_reports_drop(bus: EventBus):
    assert bus.emit_nowait(Event(type=EventType.STORAGE_RESULT)) is False
