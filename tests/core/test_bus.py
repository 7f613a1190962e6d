"""Tests for the Event Bus."""

import asyncio

import pytest
from wetdry.core.bus import Delivery, EventBus
from wetdry.core.events import EventType, InstallEvent, PushEvent, SyncEvent
from wetdry.core.types import HandlerResult, Outcome


@pytest.mark.asyncio
async def test_emit_and_subscribe(bus: EventBus):
    """Basic pub/sub works."""
    received = []

    async def handler(event, lifetime):
        received.append(event)

    bus.on(EventType.PUSH, handler)
    event = PushEvent(data=b"{}")
    await bus.emit(event)

    assert received == [event]


@pytest.mark.asyncio
async def test_emit_waits_for_extended_lifetime(bus: EventBus):
    """emit returns only after wait_until work has finished."""
    done = []

    async def slow_work():
        await asyncio.sleep(0.01)
        done.append("shown")

    async def handler(event, lifetime):
        lifetime.wait_until(slow_work())

    bus.on(EventType.PUSH, handler)
    await bus.emit(PushEvent())

    assert done == ["shown"]


@pytest.mark.asyncio
async def test_extensions_added_while_settling_are_awaited(bus: EventBus):
    done = []

    async def handler(event, lifetime):
        async def second():
            done.append("second")

        async def first():
            lifetime.wait_until(second())
            done.append("first")

        lifetime.wait_until(first())

    bus.on(EventType.ACTIVATE, handler)
    from wetdry.core.events import ActivateEvent

    await bus.emit(ActivateEvent())

    assert done == ["first", "second"]


@pytest.mark.asyncio
async def test_results_are_collected_from_returns_and_extensions(bus: EventBus):
    async def returns(event, lifetime):
        return HandlerResult(event_type="push", outcomes=[Outcome.OK])

    async def extends(event, lifetime):
        async def work():
            return HandlerResult(event_type="push", outcomes=[Outcome.PRESENT_FAILED])

        lifetime.wait_until(work())

    bus.on(EventType.PUSH, returns)
    bus.on(EventType.PUSH, extends)
    delivery = await bus.emit(PushEvent())

    assert isinstance(delivery, Delivery)
    assert len(delivery.results) == 2
    assert not delivery.ok


@pytest.mark.asyncio
async def test_handler_errors_are_collected_not_raised(bus: EventBus, caplog):
    async def broken(event, lifetime):
        raise RuntimeError("boom")

    async def broken_extension(event, lifetime):
        async def work():
            raise ValueError("bad")

        lifetime.wait_until(work())

    bus.on(EventType.SYNC, broken)
    bus.on(EventType.SYNC, broken_extension)
    delivery = await bus.emit(SyncEvent(tag="x"))

    assert len(delivery.errors) == 2
    assert not delivery.ok
    assert "Handler error for sync" in caplog.text


@pytest.mark.asyncio
async def test_wildcard_subscription(bus: EventBus):
    received = []

    async def handler(event, lifetime):
        received.append(event.type)

    bus.on("notification*", handler)
    bus.on("*", handler)

    from wetdry.core.events import NotificationCloseEvent
    from wetdry.notifications.base import DisplayedNotification, NotificationOptions

    shown = DisplayedNotification(
        title="t",
        options=NotificationOptions(
            body="b", icon="i", badge="b", tag="t", vibrate=[], data={"url": "/"}
        ),
    )
    await bus.emit(NotificationCloseEvent(notification=shown))
    await bus.emit(InstallEvent())

    assert received == ["notificationclose", "notificationclose", "install"]


@pytest.mark.asyncio
async def test_unsubscribe(bus: EventBus):
    received = []

    async def handler(event, lifetime):
        received.append(event)

    bus.on(EventType.INSTALL, handler)
    bus.off(EventType.INSTALL, handler)
    delivery = await bus.emit(InstallEvent())

    assert received == []
    assert delivery.results == []
    assert bus.subscriber_count == 0


@pytest.mark.asyncio
async def test_middleware_order(bus: EventBus):
    order = []

    async def outer(event, next_handler):
        order.append("outer:before")
        delivery = await next_handler(event)
        order.append("outer:after")
        return delivery

    async def inner(event, next_handler):
        order.append("inner:before")
        delivery = await next_handler(event)
        order.append("inner:after")
        return delivery

    async def handler(event, lifetime):
        order.append("handler")

    bus.use(outer)
    bus.use(inner)
    bus.on(EventType.INSTALL, handler)
    await bus.emit(InstallEvent())

    assert order == ["outer:before", "inner:before", "handler", "inner:after", "outer:after"]
