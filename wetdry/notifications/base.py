"""
Notification primitives — the canonical record, presentation options,
and the handle for a notification the host is displaying.

NotificationRecord is what the normalizer produces from an untrusted push
payload. NotificationOptions is what the presenter hands to the host.
DisplayedNotification comes back from the host on click/close events.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEFAULT_TITLE = "Wet & Dry ERP"
DEFAULT_BODY = "You have a new notification"
DEFAULT_ICON = "/icon.svg"
DEFAULT_BADGE = "/icon.svg"
DEFAULT_TAG = "default"
DEFAULT_URL = "/dashboard"


class Priority(str, Enum):
    """Priority levels understood by the agent."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Action(str, Enum):
    """Action ids with built-in meaning. Any other id navigates like VIEW."""

    VIEW = "view"
    DISMISS = "dismiss"


@dataclass(frozen=True, slots=True)
class ActionSpec:
    """One action button shown on a notification."""

    action: str
    title: str
    icon: str | None = None

    def to_dict(self) -> dict[str, str]:
        result = {"action": self.action, "title": self.title}
        if self.icon:
            result["icon"] = self.icon
        return result


@dataclass(slots=True)
class NotificationRecord:
    """
    A push payload after normalization.

    ``priority`` is kept as the raw string so an unrecognized value
    survives normalization and can be treated as such by the mapper.
    """

    title: str = DEFAULT_TITLE
    body: str = DEFAULT_BODY
    icon: str = DEFAULT_ICON
    badge: str = DEFAULT_BADGE
    tag: str = DEFAULT_TAG
    priority: str = Priority.MEDIUM.value
    data: dict[str, Any] = field(default_factory=lambda: {"url": DEFAULT_URL})
    actions: list[ActionSpec] = field(default_factory=list)

    @property
    def url(self) -> str:
        return self.data.get("url") or DEFAULT_URL


@dataclass(slots=True)
class NotificationOptions:
    """Everything the host needs to display a notification, except the title."""

    body: str
    icon: str
    badge: str
    tag: str
    vibrate: list[int]
    data: dict[str, Any]
    actions: list[ActionSpec] = field(default_factory=list)
    require_interaction: bool = False
    renotify: bool = True
    silent: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Host-facing shape, using the host's camelCase option names."""
        return {
            "body": self.body,
            "icon": self.icon,
            "badge": self.badge,
            "tag": self.tag,
            "vibrate": list(self.vibrate),
            "data": dict(self.data),
            "actions": [a.to_dict() for a in self.actions],
            "requireInteraction": self.require_interaction,
            "renotify": self.renotify,
            "silent": self.silent,
        }


@dataclass(slots=True)
class DisplayedNotification:
    """A notification currently (or formerly) shown by the host."""

    title: str
    options: NotificationOptions
    closed: bool = False

    @property
    def tag(self) -> str:
        return self.options.tag

    @property
    def data(self) -> dict[str, Any]:
        return self.options.data
