"""Tests for the lifecycle manager."""

import pytest
from wetdry.core.errors import LifecycleError
from wetdry.core.types import ClaimClients, DeleteCache, Outcome, SkipWaiting
from wetdry.host.memory import InMemoryWindowClient, create_in_memory_host
from wetdry.lifecycle.manager import (
    LifecycleManager,
    LifecycleState,
    is_skip_waiting,
    plan_activation,
)

CURRENT = "wetdry-erp-v1"


def _manager(caches=None, **kwargs):
    host = create_in_memory_host(caches=caches, **kwargs)
    return host, LifecycleManager(host, CURRENT, version="1.1.0")


# ━━━ Pure planning ━━━


def test_plan_activation_deletes_everything_but_current():
    effects = plan_activation(["old", CURRENT, "other"], CURRENT)
    assert effects == [DeleteCache("old"), DeleteCache("other"), ClaimClients()]


def test_plan_activation_always_claims():
    assert plan_activation([], CURRENT) == [ClaimClients()]


@pytest.mark.parametrize(
    "data, expected",
    [
        ({"type": "SKIP_WAITING"}, True),
        ({"type": "skip_waiting"}, False),
        ({"kind": "SKIP_WAITING"}, False),
        ("SKIP_WAITING", False),
        (None, False),
    ],
)
def test_is_skip_waiting(data, expected):
    assert is_skip_waiting(data) is expected


# ━━━ Transitions ━━━


@pytest.mark.asyncio
async def test_install_skips_waiting():
    host, lifecycle = _manager()
    assert lifecycle.state is LifecycleState.NEW

    result = await lifecycle.install()

    assert lifecycle.state is LifecycleState.WAITING
    assert host.registration.skip_waiting_count == 1
    assert result.effects == [SkipWaiting()]
    assert result.ok


@pytest.mark.asyncio
async def test_rejected_skip_waiting_message():
    host, lifecycle = _manager()
    host.registration.fail_skip_waiting = True

    result = await lifecycle.handle_message({"type": "SKIP_WAITING"})

    assert result.effects == [SkipWaiting()]
    assert result.outcomes == [Outcome.SKIP_WAITING_FAILED]
    assert host.registration.skip_waiting_count == 0


@pytest.mark.asyncio
async def test_activate_before_install_is_rejected():
    _, lifecycle = _manager()
    with pytest.raises(LifecycleError) as exc:
        await lifecycle.activate()
    assert exc.value.current == "new"
    assert exc.value.target == "activating"


@pytest.mark.asyncio
async def test_activate_removes_stale_caches_and_claims():
    host, lifecycle = _manager(caches=["wetdry-erp-v0", CURRENT, "images"])
    window = InMemoryWindowClient("http://localhost:3000/", controlled=False)
    host.clients.windows.append(window)

    await lifecycle.install()
    result = await lifecycle.activate()

    assert lifecycle.state is LifecycleState.ACTIVE
    assert await host.caches.keys() == [CURRENT]
    assert host.clients.claimed
    assert window.controlled
    assert result.ok
    assert len(result.outcomes) == 3  # two deletions + claim


@pytest.mark.asyncio
async def test_activate_without_current_cache_deletes_all():
    host, lifecycle = _manager(caches=["a", "b"])
    await lifecycle.install()
    await lifecycle.activate()
    assert await host.caches.keys() == []


@pytest.mark.asyncio
async def test_failed_deletion_does_not_block_others_or_claim(caplog):
    host, lifecycle = _manager(caches=["old-a", "old-b", CURRENT])
    host.caches.failing = {"old-a"}

    await lifecycle.install()
    result = await lifecycle.activate()

    assert lifecycle.state is LifecycleState.ACTIVE
    assert await host.caches.keys() == ["old-a", CURRENT]
    assert host.clients.claimed
    assert result.failures() == [Outcome.CACHE_DELETE_FAILED]
    assert "Failed to delete cache old-a" in caplog.text


@pytest.mark.asyncio
async def test_failed_claim_still_activates(caplog):
    host, lifecycle = _manager(caches=["old", CURRENT])
    host.clients.fail_claim = True

    await lifecycle.install()
    result = await lifecycle.activate()

    assert lifecycle.state is LifecycleState.ACTIVE
    assert await host.caches.keys() == [CURRENT]
    assert not host.clients.claimed
    assert result.failures() == [Outcome.CLAIM_FAILED]
    assert "Failed to claim clients" in caplog.text


@pytest.mark.asyncio
async def test_rejected_skip_waiting_on_install(caplog):
    host, lifecycle = _manager()
    host.registration.fail_skip_waiting = True

    result = await lifecycle.install()

    assert lifecycle.state is LifecycleState.WAITING
    assert result.outcomes == [Outcome.SKIP_WAITING_FAILED]
    assert "Failed to skip waiting" in caplog.text


@pytest.mark.asyncio
async def test_skip_waiting_message():
    host, lifecycle = _manager()

    result = await lifecycle.handle_message({"type": "SKIP_WAITING"})

    assert host.registration.skip_waiting_count == 1
    assert result.effects == [SkipWaiting()]


@pytest.mark.asyncio
async def test_other_messages_are_ignored():
    host, lifecycle = _manager()

    result = await lifecycle.handle_message({"type": "PING"})

    assert host.registration.skip_waiting_count == 0
    assert result.effects == []
    assert result.outcomes == []


@pytest.mark.asyncio
async def test_superseded_agent_cannot_be_reinstalled():
    _, lifecycle = _manager()
    await lifecycle.install()
    lifecycle.supersede()

    assert lifecycle.state is LifecycleState.REDUNDANT
    with pytest.raises(LifecycleError):
        await lifecycle.activate()
