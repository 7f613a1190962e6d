"""
Host capability interfaces.

The agent never reaches for ambient globals. Everything it can do to the
outside world goes through these interfaces, bundled into a Host and
passed in at construction.

Implementations:
    wetdry.host.memory — in-memory pieces for tests and the CLI
    A browser bridge would implement the same interfaces over the real
    service-worker globals.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from wetdry.notifications.base import DisplayedNotification, NotificationOptions


class WindowClient(ABC):
    """An open application page. Its lifecycle belongs to the host."""

    @property
    @abstractmethod
    def url(self) -> str:
        """Current absolute URL of the page."""
        ...

    @abstractmethod
    async def focus(self) -> None:
        """Bring the window to the front."""
        ...

    @abstractmethod
    async def navigate(self, url: str) -> None:
        """Load ``url`` (absolute or relative to the current page)."""
        ...


class Clients(ABC):
    """Enumerates and opens application windows."""

    @abstractmethod
    async def match_all(
        self, *, type: str = "window", include_uncontrolled: bool = False
    ) -> list[WindowClient]:
        """Currently open clients, in host order."""
        ...

    @abstractmethod
    async def open_window(self, url: str) -> WindowClient | None:
        """Open a new window/tab at ``url``."""
        ...

    @property
    def supports_open_window(self) -> bool:
        """Whether open_window is available on this host."""
        return True

    @abstractmethod
    async def claim(self) -> None:
        """Take control of every open page without waiting for a reload."""
        ...


class CacheStorage(ABC):
    """Named cache stores. The agent only lists and deletes them."""

    @abstractmethod
    async def keys(self) -> list[str]:
        """Names of every cache store."""
        ...

    @abstractmethod
    async def delete(self, name: str) -> bool:
        """Delete a store. Returns True if it existed."""
        ...


class Registration(ABC):
    """The agent's registration: notifications and activation control."""

    @abstractmethod
    async def show_notification(
        self, title: str, options: NotificationOptions
    ) -> DisplayedNotification:
        """
        Display a notification.

        A notification whose tag matches a visible one replaces it.
        Raises PresentationError if the host refuses.
        """
        ...

    @abstractmethod
    async def close_notification(self, notification: DisplayedNotification) -> None:
        ...

    @abstractmethod
    async def get_notifications(self, tag: str | None = None) -> list[DisplayedNotification]:
        """Visible notifications, optionally filtered by tag."""
        ...

    @abstractmethod
    async def skip_waiting(self) -> None:
        """Activate as soon as installed, without waiting for old instances."""
        ...


@dataclass(slots=True)
class Host:
    """Everything the agent may touch, plus the app origin it serves."""

    origin: str
    caches: CacheStorage
    clients: Clients
    registration: Registration
