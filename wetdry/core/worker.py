"""
PushWorker — the central coordinator.

Composes the event bus, config, host capabilities, and the notification
and lifecycle subsystems. Each host event is a named transition: the
handler reads an immutable event, plans effects, and executes them through
the injected host while holding the delivery open until they finish.

Control flow:
    push → normalize → map priority → present
    (later) notificationclick → route → navigate/focus/open
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from wetdry.core.bus import Delivery, EventBus, EventHandler, Lifetime, MiddlewareFunc
from wetdry.core.config import WorkerConfig
from wetdry.core.errors import LifecycleError
from wetdry.core.events import (
    ActivateEvent,
    Event,
    EventType,
    InstallEvent,
    MessageEvent,
    NotificationClickEvent,
    NotificationCloseEvent,
    PushEvent,
    SyncEvent,
)
from wetdry.core.types import HandlerResult, Outcome
from wetdry.host.base import Host
from wetdry.lifecycle.manager import LifecycleManager, LifecycleState
from wetdry.lifecycle.sync import BackgroundSync
from wetdry.notifications.base import DisplayedNotification
from wetdry.notifications.normalizer import normalize
from wetdry.notifications.presenter import NotificationPresenter
from wetdry.notifications.router import InteractionRouter

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class PushWorker:
    """
    The push agent.

    Usage:
        host = create_in_memory_host(windows=["http://localhost:3000/"])
        worker = PushWorker(host)

        await worker.install()
        await worker.activate()

        await worker.push(b'{"title": "Low stock", "priority": "high"}')
        shown = host.registration.visible[0]
        await worker.click(shown)
    """

    def __init__(
        self,
        host: Host,
        config: WorkerConfig | None = None,
        *,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self.config = config or WorkerConfig()
        self.host = host
        self.bus = EventBus()
        self._clock = clock

        self.lifecycle = LifecycleManager(
            host, self.config.cache.name, version=self.config.app.version
        )
        self.presenter = NotificationPresenter(host.registration, clock=clock)
        self.router = InteractionRouter(host)
        self.background_sync = BackgroundSync(self.config.sync.tag)

        self._register_handlers()

    # ━━━ Bus Shortcuts ━━━

    def on(self, event_type: str, handler: EventHandler) -> None:
        self.bus.on(event_type, handler)

    def use(self, middleware: MiddlewareFunc) -> None:
        self.bus.use(middleware)

    async def dispatch(self, event: Event) -> Delivery:
        """Deliver a host event. Returns after all its work has settled."""
        return await self.bus.emit(event)

    @property
    def state(self) -> LifecycleState:
        return self.lifecycle.state

    # ━━━ Convenience Entry Points ━━━

    async def install(self) -> HandlerResult:
        return _single(await self.dispatch(InstallEvent()), EventType.INSTALL)

    async def activate(self) -> HandlerResult:
        return _single(await self.dispatch(ActivateEvent()), EventType.ACTIVATE)

    async def push(self, data: bytes | str | None = None) -> HandlerResult:
        return _single(await self.dispatch(PushEvent(data=data)), EventType.PUSH)

    async def click(self, notification: DisplayedNotification, action: str = "") -> HandlerResult:
        event = NotificationClickEvent(notification=notification, action=action)
        return _single(await self.dispatch(event), EventType.NOTIFICATION_CLICK)

    async def close(self, notification: DisplayedNotification) -> HandlerResult:
        event = NotificationCloseEvent(notification=notification)
        return _single(await self.dispatch(event), EventType.NOTIFICATION_CLOSE)

    async def sync(self, tag: str) -> HandlerResult:
        return _single(await self.dispatch(SyncEvent(tag=tag)), EventType.SYNC)

    async def message(self, data: Any) -> HandlerResult:
        return _single(await self.dispatch(MessageEvent(data=data)), EventType.MESSAGE)

    # ━━━ Handlers ━━━

    def _register_handlers(self) -> None:
        self.bus.on(EventType.INSTALL, self._on_install)
        self.bus.on(EventType.ACTIVATE, self._on_activate)
        self.bus.on(EventType.PUSH, self._on_push)
        self.bus.on(EventType.NOTIFICATION_CLICK, self._on_click)
        self.bus.on(EventType.NOTIFICATION_CLOSE, self._on_close)
        self.bus.on(EventType.SYNC, self._on_sync)
        self.bus.on(EventType.MESSAGE, self._on_message)

    async def _on_install(self, event: InstallEvent, lifetime: Lifetime) -> None:
        lifetime.wait_until(self.lifecycle.install())

    async def _on_activate(self, event: ActivateEvent, lifetime: Lifetime) -> None:
        lifetime.wait_until(self.lifecycle.activate())

    async def _on_push(self, event: PushEvent, lifetime: Lifetime) -> None:
        logger.info("Push notification received")
        lifetime.wait_until(self._handle_push(event))

    async def _handle_push(self, event: PushEvent) -> HandlerResult:
        record, decoded = normalize(event.data, self.config.notifications, clock=self._clock)
        result = HandlerResult(event_type=EventType.PUSH, effects=self.presenter.plan(record))
        result.record(decoded)
        for effect in result.effects:
            result.record(await self.presenter.show(effect))
        return result

    async def _on_click(self, event: NotificationClickEvent, lifetime: Lifetime) -> None:
        lifetime.wait_until(self.router.handle(event))

    async def _on_close(self, event: NotificationCloseEvent, lifetime: Lifetime) -> HandlerResult:
        logger.info(f"Notification closed: {event.notification.tag!r}")
        return HandlerResult(event_type=EventType.NOTIFICATION_CLOSE, outcomes=[Outcome.OK])

    async def _on_sync(self, event: SyncEvent, lifetime: Lifetime) -> None:
        lifetime.wait_until(self.background_sync.handle(event))

    async def _on_message(self, event: MessageEvent, lifetime: Lifetime) -> None:
        logger.info(f"Message received: {event.data!r}")
        lifetime.wait_until(self.lifecycle.handle_message(event.data))


def _single(delivery: Delivery, event_type: str) -> HandlerResult:
    """
    The worker's own result for a delivery.

    Lifecycle misuse is re-raised. Any other handler crash is recorded as
    HANDLER_FAILED so the caller never mistakes it for success.
    """
    for error in delivery.errors:
        if isinstance(error, LifecycleError):
            raise error
    result = next(
        (r for r in delivery.results if r.event_type == event_type),
        None,
    )
    if result is None:
        result = HandlerResult(event_type=event_type)
    for _ in delivery.errors:
        result.record(Outcome.HANDLER_FAILED)
    return result
