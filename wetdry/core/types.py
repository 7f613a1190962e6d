"""
WetDry shared types — outcomes, handler results, and side-effect records.

Handlers never perform host calls directly from their planning step.
They describe what should happen as a list of effects, and the worker
executes those effects through the injected host capabilities.
Every executed effect yields an Outcome so tests can assert on failures
that the agent otherwise only logs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from wetdry.host.base import WindowClient
    from wetdry.notifications.base import DisplayedNotification, NotificationOptions


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Enums
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class Outcome(str, Enum):
    """Result of one side-effecting step. None of these abort a handler."""

    OK = "ok"
    DECODE_FAILED = "decode_failed"
    PRESENT_FAILED = "present_failed"
    CACHE_DELETE_FAILED = "cache_delete_failed"
    NAVIGATE_FAILED = "navigate_failed"
    CLAIM_FAILED = "claim_failed"
    SKIP_WAITING_FAILED = "skip_waiting_failed"
    HANDLER_FAILED = "handler_failed"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Effects
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


@dataclass(frozen=True, slots=True)
class ShowNotification:
    """Display an OS notification."""

    title: str
    options: NotificationOptions


@dataclass(frozen=True, slots=True)
class CloseNotification:
    """Close a notification the user interacted with."""

    notification: DisplayedNotification


@dataclass(frozen=True, slots=True)
class NavigateAndFocus:
    """Navigate an existing window, then bring it to the front."""

    client: WindowClient
    url: str


@dataclass(frozen=True, slots=True)
class OpenWindow:
    """Open a new window or tab."""

    url: str


@dataclass(frozen=True, slots=True)
class DeleteCache:
    """Delete one named cache store."""

    name: str


@dataclass(frozen=True, slots=True)
class ClaimClients:
    """Take control of every open page."""


@dataclass(frozen=True, slots=True)
class SkipWaiting:
    """Skip the waiting phase and activate immediately."""


Effect = Union[
    ShowNotification,
    CloseNotification,
    NavigateAndFocus,
    OpenWindow,
    DeleteCache,
    ClaimClients,
    SkipWaiting,
]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Handler Results
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


@dataclass(slots=True)
class HandlerResult:
    """What one event handler planned and how each step turned out."""

    event_type: str
    effects: list[Effect] = field(default_factory=list)
    outcomes: list[Outcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(o is Outcome.OK for o in self.outcomes)

    def record(self, outcome: Outcome) -> None:
        self.outcomes.append(outcome)

    def failures(self) -> list[Outcome]:
        return [o for o in self.outcomes if o is not Outcome.OK]
