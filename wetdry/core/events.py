"""
WetDry Event System — types and immutable event records.

The host delivers one event at a time per handler invocation.
Each record is frozen: handlers read it, plan effects, and never mutate it.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from wetdry.notifications.base import DisplayedNotification


class EventType:
    """
    Event type constants.

    Names match the host's event names so a bridge can forward them as-is.
    """

    # Agent lifecycle
    INSTALL = "install"
    ACTIVATE = "activate"

    # Push delivery and interaction
    PUSH = "push"
    NOTIFICATION_CLICK = "notificationclick"
    NOTIFICATION_CLOSE = "notificationclose"

    # Background work and page messages
    SYNC = "sync"
    MESSAGE = "message"

    # Wildcard
    ALL = "*"


@dataclass(frozen=True, slots=True, kw_only=True)
class Event:
    """
    Base record for everything the host delivers to the agent.

    Subclasses set ``type``; ``id`` and ``timestamp`` are filled in
    automatically so logs can correlate one delivery end to end.
    """

    type: ClassVar[str] = ""

    id: str = field(default_factory=lambda: uuid.uuid4().hex[:16])
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True, slots=True)
class InstallEvent(Event):
    type: ClassVar[str] = EventType.INSTALL


@dataclass(frozen=True, slots=True)
class ActivateEvent(Event):
    type: ClassVar[str] = EventType.ACTIVATE


@dataclass(frozen=True, slots=True)
class PushEvent(Event):
    """A push message. ``data`` is the raw body, or None when empty."""

    type: ClassVar[str] = EventType.PUSH

    data: bytes | str | None = None


@dataclass(frozen=True, slots=True)
class NotificationClickEvent(Event):
    """The user clicked a notification body (action "") or an action button."""

    type: ClassVar[str] = EventType.NOTIFICATION_CLICK

    notification: DisplayedNotification
    action: str = ""


@dataclass(frozen=True, slots=True)
class NotificationCloseEvent(Event):
    type: ClassVar[str] = EventType.NOTIFICATION_CLOSE

    notification: DisplayedNotification


@dataclass(frozen=True, slots=True)
class SyncEvent(Event):
    type: ClassVar[str] = EventType.SYNC

    tag: str


@dataclass(frozen=True, slots=True)
class MessageEvent(Event):
    """A message posted by a page, e.g. ``{"type": "SKIP_WAITING"}``."""

    type: ClassVar[str] = EventType.MESSAGE

    data: Any = None
