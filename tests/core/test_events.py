"""Tests for event records."""

import dataclasses

import pytest
from wetdry.core.events import (
    ActivateEvent,
    EventType,
    InstallEvent,
    MessageEvent,
    PushEvent,
    SyncEvent,
)


def test_event_types():
    assert InstallEvent().type == EventType.INSTALL
    assert ActivateEvent().type == "activate"
    assert PushEvent().type == "push"
    assert SyncEvent(tag="t").type == "sync"
    assert MessageEvent().type == "message"


def test_events_are_immutable():
    event = PushEvent(data=b"{}")
    with pytest.raises(dataclasses.FrozenInstanceError):
        event.data = b"[]"  # type: ignore[misc]


def test_events_get_unique_ids_and_timestamps():
    a, b = PushEvent(), PushEvent()
    assert a.id != b.id
    assert len(a.id) == 16
    assert a.timestamp > 0


def test_push_event_data_defaults_to_none():
    assert PushEvent().data is None
