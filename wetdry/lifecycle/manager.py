"""
LifecycleManager — install/activate/update transitions of the agent.

    new → installing → waiting → activating → active
      any state except redundant → redundant (superseded by a newer build)

Install never lingers in ``waiting``: it asks the host to skip the wait so
the new build takes over immediately. Activation garbage-collects every
cache store that is not the current build's, claims every open page, and
only then reports ``active``.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Iterable

from wetdry.core.errors import LifecycleError
from wetdry.core.events import EventType
from wetdry.core.types import (
    ClaimClients,
    DeleteCache,
    Effect,
    HandlerResult,
    Outcome,
    SkipWaiting,
)
from wetdry.host.base import Host

logger = logging.getLogger(__name__)

SKIP_WAITING = "SKIP_WAITING"


class LifecycleState(str, Enum):
    NEW = "new"
    INSTALLING = "installing"
    WAITING = "waiting"
    ACTIVATING = "activating"
    ACTIVE = "active"
    REDUNDANT = "redundant"


_TRANSITIONS: dict[LifecycleState, frozenset[LifecycleState]] = {
    LifecycleState.NEW: frozenset({LifecycleState.INSTALLING, LifecycleState.REDUNDANT}),
    LifecycleState.INSTALLING: frozenset({LifecycleState.WAITING, LifecycleState.REDUNDANT}),
    LifecycleState.WAITING: frozenset({LifecycleState.ACTIVATING, LifecycleState.REDUNDANT}),
    LifecycleState.ACTIVATING: frozenset({LifecycleState.ACTIVE, LifecycleState.REDUNDANT}),
    LifecycleState.ACTIVE: frozenset({LifecycleState.REDUNDANT}),
    LifecycleState.REDUNDANT: frozenset(),
}


def plan_activation(cache_names: Iterable[str], current: str) -> list[Effect]:
    """Delete every stale cache store, then claim open pages."""
    effects: list[Effect] = [DeleteCache(name=n) for n in cache_names if n != current]
    effects.append(ClaimClients())
    return effects


def is_skip_waiting(data: Any) -> bool:
    return isinstance(data, dict) and data.get("type") == SKIP_WAITING


class LifecycleManager:
    """
    Drives the agent's own lifecycle against the host.

    Usage:
        lifecycle = LifecycleManager(host, cache_name="wetdry-erp-v1")
        await lifecycle.install()
        await lifecycle.activate()
        assert lifecycle.state is LifecycleState.ACTIVE
    """

    def __init__(self, host: Host, cache_name: str, version: str = "") -> None:
        self._host = host
        self._cache_name = cache_name
        self._version = version
        self._state = LifecycleState.NEW

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def cache_name(self) -> str:
        return self._cache_name

    def _transition(self, target: LifecycleState) -> None:
        if target not in _TRANSITIONS[self._state]:
            raise LifecycleError(
                f"Cannot go from {self._state.value} to {target.value}",
                current=self._state.value,
                target=target.value,
            )
        logger.debug(f"Lifecycle {self._state.value} → {target.value}")
        self._state = target

    # ━━━ Transitions ━━━

    async def install(self) -> HandlerResult:
        self._transition(LifecycleState.INSTALLING)
        logger.info(f"Installing push agent {self._version}".rstrip())
        result = HandlerResult(event_type=EventType.INSTALL, effects=[SkipWaiting()])
        result.record(await self._skip_waiting())
        # Reached even when the host refused to skip waiting.
        self._transition(LifecycleState.WAITING)
        return result

    async def activate(self) -> HandlerResult:
        self._transition(LifecycleState.ACTIVATING)
        logger.info("Activating push agent")

        try:
            names = await self._host.caches.keys()
        except Exception as e:
            logger.error(f"Could not list cache stores: {e}")
            names = []

        effects = plan_activation(names, self._cache_name)
        result = HandlerResult(event_type=EventType.ACTIVATE, effects=effects)
        deletions = [e for e in effects if isinstance(e, DeleteCache)]

        outcomes = await asyncio.gather(
            *(self._delete(e.name) for e in deletions),
            self._claim(),
        )
        for outcome in outcomes:
            result.record(outcome)

        self._transition(LifecycleState.ACTIVE)
        return result

    async def handle_message(self, data: Any) -> HandlerResult:
        """Page → agent control messages. Only SKIP_WAITING is understood."""
        result = HandlerResult(event_type=EventType.MESSAGE)
        if not is_skip_waiting(data):
            logger.debug(f"Ignoring message: {data!r}")
            return result
        logger.info("Skip-waiting requested by page")
        result.effects.append(SkipWaiting())
        result.record(await self._skip_waiting())
        return result

    def supersede(self) -> None:
        """A newer build took over; this instance does no more work."""
        self._transition(LifecycleState.REDUNDANT)

    # ━━━ Internals ━━━

    async def _skip_waiting(self) -> Outcome:
        try:
            await self._host.registration.skip_waiting()
        except Exception as e:
            logger.error(f"Failed to skip waiting: {e}")
            return Outcome.SKIP_WAITING_FAILED
        return Outcome.OK

    async def _delete(self, name: str) -> Outcome:
        try:
            await self._host.caches.delete(name)
        except Exception as e:
            logger.error(f"Failed to delete cache {name}: {e}")
            return Outcome.CACHE_DELETE_FAILED
        logger.info(f"Deleted stale cache {name}")
        return Outcome.OK

    async def _claim(self) -> Outcome:
        try:
            await self._host.clients.claim()
        except Exception as e:
            # Pages stay uncontrolled until their next load.
            logger.error(f"Failed to claim clients: {e}")
            return Outcome.CLAIM_FAILED
        return Outcome.OK
