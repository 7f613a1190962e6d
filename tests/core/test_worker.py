"""End-to-end tests for the push worker."""

import json

import pytest
from wetdry.core.bus import Delivery
from wetdry.core.errors import LifecycleError
from wetdry.core.events import SyncEvent
from wetdry.core.types import Outcome
from wetdry.host.memory import create_in_memory_host
from wetdry.lifecycle.manager import LifecycleState
from wetdry.middleware.outcomes import OutcomeTracker
from wetdry.core.worker import PushWorker, _single

ORIGIN = "http://localhost:3000"


async def _ready(worker: PushWorker) -> PushWorker:
    await worker.install()
    await worker.activate()
    return worker


@pytest.mark.asyncio
async def test_install_and_activate(worker, host):
    await worker.install()
    assert worker.state is LifecycleState.WAITING

    result = await worker.activate()

    assert worker.state is LifecycleState.ACTIVE
    assert result.ok
    assert await host.caches.keys() == ["wetdry-erp-v1"]
    assert host.clients.claimed


@pytest.mark.asyncio
async def test_activating_twice_raises(worker):
    await _ready(worker)
    with pytest.raises(LifecycleError):
        await worker.activate()


@pytest.mark.asyncio
async def test_critical_push_then_body_click(worker, host):
    """Critical payload → persistent vibrating notification → click navigates."""
    await _ready(worker)

    pushed = await worker.push(
        json.dumps({"priority": "critical", "data": {"url": "/trucks/42"}}).encode()
    )

    assert pushed.ok
    [shown] = host.registration.visible
    assert shown.options.vibrate == [200, 100, 200, 100, 200]
    assert shown.options.require_interaction is True
    assert shown.options.silent is False
    assert shown.tag == "default"
    assert shown.data["timestamp"] == 1_700_000_000_000

    clicked = await worker.click(shown)

    [window] = host.clients.windows
    assert clicked.ok
    assert shown.closed
    assert window.url == f"{ORIGIN}/trucks/42"
    assert window.focused
    assert host.clients.opened == []


@pytest.mark.asyncio
async def test_same_tag_shows_one_notification(worker, host):
    await worker.push(b'{"title": "first", "tag": "silo-3"}')
    await worker.push(b'{"title": "second", "tag": "silo-3"}')

    visible = host.registration.visible
    assert [n.title for n in visible] == ["second"]
    assert visible[0].options.renotify is True


@pytest.mark.asyncio
async def test_malformed_push_still_shows(worker, host):
    result = await worker.push(b"Diesel delivery arrived")

    assert result.outcomes == [Outcome.DECODE_FAILED, Outcome.OK]
    [shown] = host.registration.visible
    assert shown.title == "Wet & Dry ERP"
    assert shown.options.body == "Diesel delivery arrived"


@pytest.mark.asyncio
async def test_empty_push_shows_defaults(worker, host):
    result = await worker.push(None)

    assert result.ok
    [shown] = host.registration.visible
    assert shown.options.body == "You have a new notification"
    assert shown.data["url"] == "/dashboard"
    assert shown.options.vibrate == [100, 50, 100]


@pytest.mark.asyncio
async def test_presentation_failure_is_terminal(worker, host):
    host.registration.fail_show = True

    result = await worker.push(b'{"title": "x"}')

    assert result.failures() == [Outcome.PRESENT_FAILED]
    assert host.registration.shown == []


@pytest.mark.asyncio
async def test_dismiss_click_does_not_navigate(worker, host):
    await worker.push(b'{"data": {"url": "/exceptions"}}')
    [shown] = host.registration.visible

    await worker.click(shown, "dismiss")

    [window] = host.clients.windows
    assert shown.closed
    assert window.history == [f"{ORIGIN}/inventory"]
    assert not window.focused
    assert host.clients.opened == []


@pytest.mark.asyncio
async def test_click_without_windows_opens_one(config, clock):
    host = create_in_memory_host(ORIGIN)
    worker = PushWorker(host, config, clock=clock)
    await worker.push(b'{"data": {}}')
    [shown] = host.registration.visible

    await worker.click(shown, "view")

    [opened] = host.clients.opened
    assert opened.url == f"{ORIGIN}/dashboard"


@pytest.mark.asyncio
async def test_close_event_is_logged(worker, host, caplog):
    import logging

    caplog.set_level(logging.INFO, logger="wetdry")
    await worker.push(b'{"tag": "maintenance_due_date"}')
    [shown] = host.registration.visible

    result = await worker.close(shown)

    assert result.outcomes == [Outcome.OK]
    assert "Notification closed: 'maintenance_due_date'" in caplog.text


@pytest.mark.asyncio
async def test_sync_and_message(worker, host):
    synced = await worker.sync("sync-notifications")
    assert synced.outcomes == [Outcome.OK]

    await worker.message({"type": "SKIP_WAITING"})
    await worker.message({"type": "HELLO"})
    assert host.registration.skip_waiting_count == 1


@pytest.mark.asyncio
async def test_outcome_tracker_via_worker(worker, host):
    tracker = OutcomeTracker()
    worker.use(tracker.middleware)

    await worker.push(b"\xff")
    host.registration.fail_show = True
    await worker.push(b"{}")

    assert tracker.deliveries["push"] == 2
    assert tracker.count("push", Outcome.DECODE_FAILED) == 1
    assert tracker.count("push", Outcome.PRESENT_FAILED) == 1
    assert tracker.failure_count == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["1" * 5000, "[" * 100_000])
async def test_hostile_push_still_shows(worker, host, raw):
    result = await worker.push(raw)

    assert result.outcomes == [Outcome.DECODE_FAILED, Outcome.OK]
    [shown] = host.registration.visible
    assert shown.title == "Wet & Dry ERP"
    assert shown.tag == "default"


@pytest.mark.asyncio
async def test_crashing_handler_is_reported_as_failure(worker):
    async def broken(event, lifetime):
        raise RuntimeError("boom")

    worker.on("push", broken)
    result = await worker.push(b"{}")

    assert not result.ok
    assert Outcome.HANDLER_FAILED in result.failures()


def test_crash_without_result_is_not_ok():
    delivery = Delivery(event=SyncEvent(tag="sync-notifications"), errors=[RuntimeError("boom")])

    result = _single(delivery, "sync")

    assert result.outcomes == [Outcome.HANDLER_FAILED]
    assert not result.ok


@pytest.mark.asyncio
async def test_rejected_skip_waiting_does_not_block_activation(worker, host):
    host.registration.fail_skip_waiting = True

    installed = await worker.install()

    assert installed.outcomes == [Outcome.SKIP_WAITING_FAILED]
    assert worker.state is LifecycleState.WAITING

    activated = await worker.activate()
    assert worker.state is LifecycleState.ACTIVE
    assert activated.ok
