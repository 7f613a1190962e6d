"""Shared test fixtures for WetDry."""

import pytest
from wetdry.core.config import WorkerConfig
from wetdry.core.bus import EventBus
from wetdry.core.worker import PushWorker
from wetdry.host.memory import create_in_memory_host

ORIGIN = "http://localhost:3000"
NOW_MS = 1_700_000_000_000


@pytest.fixture
def config():
    """Create a default config without loading from disk."""
    return WorkerConfig()


@pytest.fixture
def bus():
    """Create a fresh event bus."""
    return EventBus()


@pytest.fixture
def clock():
    """Frozen millisecond clock."""
    return lambda: NOW_MS


@pytest.fixture
def host():
    """In-memory host with one open app window and a stale cache."""
    return create_in_memory_host(
        ORIGIN,
        windows=[f"{ORIGIN}/inventory"],
        caches=["wetdry-erp-v0", "wetdry-erp-v1"],
    )


@pytest.fixture
def empty_host():
    """In-memory host with no open windows and no caches."""
    return create_in_memory_host(ORIGIN)


@pytest.fixture
def worker(host, config, clock):
    """A worker wired to the in-memory host."""
    return PushWorker(host, config, clock=clock)
