"""
InteractionRouter — decides what a notification click does.

Routing logic:

    1. Always close the clicked notification first.
    2. "dismiss" action → stop there.
       "view", a body click (no action), or any other action → target data.url.
    3. First open window on the app's origin → navigate it, then focus it.
    4. No such window → open a new one, if the host can.

Every step is attempted once. Failures are logged and recorded as
outcomes; nothing is retried and nothing is raised.
"""

from __future__ import annotations

import logging
from typing import Sequence
from urllib.parse import urlsplit

from wetdry.core.events import EventType, NotificationClickEvent
from wetdry.core.types import (
    CloseNotification,
    Effect,
    HandlerResult,
    NavigateAndFocus,
    OpenWindow,
    Outcome,
)
from wetdry.host.base import Host, WindowClient
from wetdry.notifications.base import DEFAULT_URL, Action, DisplayedNotification

logger = logging.getLogger(__name__)

_DEFAULT_PORTS = {"http": 80, "https": 443}


def origin_of(url: str) -> str:
    """scheme://host[:port] of an absolute URL, or "" for relative/invalid ones."""
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return ""
    if not parts.scheme or not parts.hostname:
        return ""
    scheme = parts.scheme.lower()
    origin = f"{scheme}://{parts.hostname.lower()}"
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        origin += f":{port}"
    return origin


def same_origin(url: str, origin: str) -> bool:
    own = origin_of(origin)
    return bool(own) and origin_of(url) == own


def target_url(notification: DisplayedNotification, action: str = "") -> str | None:
    """Where a click should lead, or None when it should not navigate."""
    if action == Action.DISMISS.value:
        return None
    url = notification.data.get("url")
    return url if isinstance(url, str) and url else DEFAULT_URL


def plan_route(
    url: str,
    windows: Sequence[WindowClient],
    origin: str,
    can_open_window: bool = True,
) -> list[Effect]:
    """Reuse the first same-origin window, otherwise open a new one."""
    for client in windows:
        if same_origin(client.url, origin):
            return [NavigateAndFocus(client=client, url=url)]
    if can_open_window:
        return [OpenWindow(url=url)]
    return []


def plan_click(
    event: NotificationClickEvent,
    windows: Sequence[WindowClient],
    origin: str,
    can_open_window: bool = True,
) -> list[Effect]:
    """Every effect a click produces, in execution order."""
    effects: list[Effect] = [CloseNotification(notification=event.notification)]
    url = target_url(event.notification, event.action)
    if url is not None:
        effects.extend(plan_route(url, windows, origin, can_open_window))
    return effects


class InteractionRouter:
    """
    Executes click routing against the host.

    Usage:
        router = InteractionRouter(host)
        result = await router.handle(NotificationClickEvent(notification, action="view"))
    """

    def __init__(self, host: Host) -> None:
        self._host = host

    async def handle(self, event: NotificationClickEvent) -> HandlerResult:
        notification = event.notification
        logger.info(f"Notification clicked: {notification.tag!r} action={event.action!r}")
        result = HandlerResult(event_type=EventType.NOTIFICATION_CLICK)

        close = CloseNotification(notification=notification)
        result.effects.append(close)
        result.record(await self._execute(close))

        url = target_url(notification, event.action)
        if url is None:
            logger.debug(f"Notification dismissed: {notification.tag!r}")
            return result

        clients = self._host.clients
        route = plan_route(
            url,
            await self._windows(),
            self._host.origin,
            clients.supports_open_window,
        )
        if not route:
            logger.info(f"No window to navigate and host cannot open one: {url}")
        for effect in route:
            result.effects.append(effect)
            result.record(await self._execute(effect))
        return result

    async def _windows(self) -> list[WindowClient]:
        try:
            return await self._host.clients.match_all(
                type="window", include_uncontrolled=True
            )
        except Exception as e:
            logger.warning(f"Could not enumerate windows: {e}")
            return []

    async def _execute(self, effect: Effect) -> Outcome:
        if isinstance(effect, CloseNotification):
            try:
                await self._host.registration.close_notification(effect.notification)
            except Exception as e:
                logger.warning(f"Failed to close notification {effect.notification.tag!r}: {e}")
                return Outcome.PRESENT_FAILED
            return Outcome.OK

        if isinstance(effect, NavigateAndFocus):
            try:
                await effect.client.navigate(effect.url)
                await effect.client.focus()
            except Exception as e:
                logger.error(f"Failed to navigate window to {effect.url}: {e}")
                return Outcome.NAVIGATE_FAILED
            logger.debug(f"Focused existing window at {effect.url}")
            return Outcome.OK

        if isinstance(effect, OpenWindow):
            try:
                await self._host.clients.open_window(effect.url)
            except Exception as e:
                logger.error(f"Failed to open window at {effect.url}: {e}")
                return Outcome.NAVIGATE_FAILED
            logger.debug(f"Opened new window at {effect.url}")
            return Outcome.OK

        raise TypeError(f"InteractionRouter cannot execute {type(effect).__name__}")
