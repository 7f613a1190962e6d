"""
WetDry Event Bus — delivers host events to handlers.

Combines two patterns:
1. Observer (pub/sub): handlers subscribe to event types
2. Middleware chain: deliveries pass through middleware first

On top of that, every delivery carries a Lifetime. A handler that starts
multi-step async work registers it with ``lifetime.wait_until(...)``, and
``emit`` does not return until all of that work has settled. This is the
agent's equivalent of holding the host event open.
"""

from __future__ import annotations

import asyncio
import fnmatch
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from wetdry.core.events import Event
from wetdry.core.types import HandlerResult

logger = logging.getLogger(__name__)


class Lifetime:
    """
    Tracks work that must finish before a delivery counts as handled.

    Awaitables are scheduled as soon as they are registered, so two
    extensions from the same handler run concurrently.
    """

    def __init__(self, event: Event) -> None:
        self._event = event
        self._pending: list[asyncio.Future] = []

    def wait_until(self, work: Awaitable[Any]) -> asyncio.Future:
        """Extend the delivery until ``work`` completes."""
        future = asyncio.ensure_future(work)
        self._pending.append(future)
        return future

    @property
    def pending(self) -> int:
        return sum(1 for f in self._pending if not f.done())

    async def settle(self) -> list[Any]:
        """Wait for every extension, including ones added while waiting."""
        results: list[Any] = []
        while self._pending:
            batch, self._pending = self._pending, []
            results.extend(await asyncio.gather(*batch, return_exceptions=True))
        return results


@dataclass(slots=True)
class Delivery:
    """One event after every handler and extension has finished."""

    event: Event
    results: list[HandlerResult] = field(default_factory=list)
    errors: list[BaseException] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors and all(r.ok for r in self.results)


# Type aliases
EventHandler = Callable[[Event, Lifetime], Awaitable[HandlerResult | None]]
MiddlewareNext = Callable[[Event], Awaitable[Delivery]]
MiddlewareFunc = Callable[[Event, MiddlewareNext], Awaitable[Delivery]]


class EventBus:
    """
    Publish/subscribe event bus with middleware pipeline.

    Usage:
        bus = EventBus()

        async def on_push(event, lifetime):
            lifetime.wait_until(show(event))

        bus.on("push", on_push)
        bus.on("*", audit_handler)
        bus.use(event_logger.middleware)

        delivery = await bus.emit(PushEvent(data=b"{}"))
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[EventHandler]] = {}
        self._middleware: list[MiddlewareFunc] = []

    # ━━━ Subscription ━━━

    def on(self, event_type: str, handler: EventHandler) -> None:
        """Subscribe to an event type. Supports wildcards: 'notification*', '*'."""
        if event_type not in self._subscribers:
            self._subscribers[event_type] = []
        self._subscribers[event_type].append(handler)

    def off(self, event_type: str, handler: EventHandler) -> None:
        """Unsubscribe from an event type."""
        if event_type in self._subscribers:
            self._subscribers[event_type] = [
                h for h in self._subscribers[event_type] if h is not handler
            ]
            if not self._subscribers[event_type]:
                del self._subscribers[event_type]

    # ━━━ Middleware ━━━

    def use(self, middleware: MiddlewareFunc) -> None:
        """
        Add middleware to the delivery pipeline.

        Middleware signature:
            async def my_middleware(event: Event, next: MiddlewareNext) -> Delivery:
                delivery = await next(event)
                return delivery
        """
        self._middleware.append(middleware)

    # ━━━ Emission ━━━

    async def emit(self, event: Event) -> Delivery:
        """
        Deliver an event through the middleware chain, then to subscribers.

        Subscribers run concurrently. Returns once every subscriber and
        every lifetime extension has settled. Never raises for handler
        failures; they are logged and collected on the Delivery.
        """
        chain = self._build_chain()
        return await chain(event)

    # ━━━ Internals ━━━

    def _build_chain(self) -> MiddlewareNext:
        """Build the middleware chain ending with subscriber dispatch."""

        async def dispatch(event: Event) -> Delivery:
            delivery = Delivery(event=event)
            handlers = self._find_handlers(event.type)
            if not handlers:
                logger.debug(f"No handlers for {event.type}")
                return delivery

            lifetime = Lifetime(event)
            results = await asyncio.gather(
                *(h(event, lifetime) for h in handlers),
                return_exceptions=True,
            )
            results.extend(await lifetime.settle())

            for result in results:
                if isinstance(result, HandlerResult):
                    delivery.results.append(result)
                elif isinstance(result, BaseException):
                    logger.error(
                        f"Handler error for {event.type}: {result}",
                        exc_info=result,
                    )
                    delivery.errors.append(result)
            return delivery

        handler: MiddlewareNext = dispatch
        for mw in reversed(self._middleware):
            next_handler = handler

            async def make_handler(
                event: Event,
                *,
                _mw: MiddlewareFunc = mw,
                _next: MiddlewareNext = next_handler,
            ) -> Delivery:
                return await _mw(event, _next)

            handler = make_handler

        return handler

    def _find_handlers(self, event_type: str) -> list[EventHandler]:
        """Find all handlers matching an event type, including wildcards."""
        handlers: list[EventHandler] = []

        for pattern, subs in self._subscribers.items():
            if pattern == event_type or pattern == "*":
                handlers.extend(subs)
            elif "*" in pattern and fnmatch.fnmatch(event_type, pattern):
                handlers.extend(subs)

        return handlers

    @property
    def subscriber_count(self) -> int:
        """Total number of subscriptions (for debugging)."""
        return sum(len(subs) for subs in self._subscribers.values())
