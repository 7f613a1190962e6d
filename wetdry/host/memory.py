"""
In-memory host — for testing and local simulation.

Behaves like a browser closely enough for the agent's purposes:
same-tag notifications replace each other, claimed windows become
controlled, relative URLs resolve against the page or origin.
Each piece can be told to fail so error paths are exercisable.
"""

from __future__ import annotations

from urllib.parse import urljoin

from wetdry.core.errors import (
    CacheDeleteError,
    ClientsError,
    NavigationError,
    PresentationError,
    RegistrationError,
)
from wetdry.host.base import CacheStorage, Clients, Host, Registration, WindowClient
from wetdry.notifications.base import DisplayedNotification, NotificationOptions


class InMemoryWindowClient(WindowClient):
    """
    A fake open page.

    Usage:
        window = InMemoryWindowClient("http://localhost:3000/inventory")
        await window.navigate("/trucks/42")
        assert window.url == "http://localhost:3000/trucks/42"
    """

    def __init__(
        self,
        url: str,
        *,
        controlled: bool = True,
        fail_navigation: bool = False,
    ) -> None:
        self._url = url
        self.controlled = controlled
        self.fail_navigation = fail_navigation
        self.history: list[str] = [url]
        self.focus_count = 0

    @property
    def url(self) -> str:
        return self._url

    @property
    def focused(self) -> bool:
        return self.focus_count > 0

    async def focus(self) -> None:
        self.focus_count += 1

    async def navigate(self, url: str) -> None:
        if self.fail_navigation:
            raise NavigationError(f"Navigation to {url} refused", url=url)
        self._url = urljoin(self._url, url)
        self.history.append(self._url)

    def __repr__(self) -> str:
        return f"InMemoryWindowClient({self._url!r})"


class InMemoryClients(Clients):
    def __init__(
        self,
        origin: str,
        windows: list[InMemoryWindowClient] | None = None,
        *,
        can_open: bool = True,
        fail_match: bool = False,
        fail_claim: bool = False,
    ) -> None:
        self._origin = origin
        self.windows: list[InMemoryWindowClient] = list(windows or [])
        self.can_open = can_open
        self.fail_match = fail_match
        self.fail_claim = fail_claim
        self.opened: list[InMemoryWindowClient] = []
        self.claimed = False

    async def match_all(
        self, *, type: str = "window", include_uncontrolled: bool = False
    ) -> list[WindowClient]:
        if self.fail_match:
            raise ClientsError("Could not list open pages")
        if type not in ("window", "all"):
            return []
        return [w for w in self.windows if include_uncontrolled or w.controlled]

    @property
    def supports_open_window(self) -> bool:
        return self.can_open

    async def open_window(self, url: str) -> WindowClient | None:
        if not self.can_open:
            raise NavigationError("Host cannot open windows", url=url)
        window = InMemoryWindowClient(urljoin(self._origin + "/", url))
        self.windows.append(window)
        self.opened.append(window)
        return window

    async def claim(self) -> None:
        if self.fail_claim:
            raise ClientsError("Could not claim open pages")
        for window in self.windows:
            window.controlled = True
        self.claimed = True


class InMemoryCacheStorage(CacheStorage):
    def __init__(self, names: list[str] | None = None, *, failing: set[str] | None = None) -> None:
        self._names: list[str] = list(names or [])
        self.failing = failing or set()

    async def keys(self) -> list[str]:
        return list(self._names)

    async def delete(self, name: str) -> bool:
        if name in self.failing:
            raise CacheDeleteError(f"Could not delete cache {name}", cache_name=name)
        if name in self._names:
            self._names.remove(name)
            return True
        return False


class InMemoryRegistration(Registration):
    def __init__(
        self,
        *,
        fail_show: bool = False,
        fail_close: bool = False,
        fail_skip_waiting: bool = False,
    ) -> None:
        self.fail_show = fail_show
        self.fail_close = fail_close
        self.fail_skip_waiting = fail_skip_waiting
        self.shown: list[DisplayedNotification] = []
        self._visible: list[DisplayedNotification] = []
        self.skip_waiting_count = 0

    @property
    def visible(self) -> list[DisplayedNotification]:
        return list(self._visible)

    async def show_notification(
        self, title: str, options: NotificationOptions
    ) -> DisplayedNotification:
        if self.fail_show:
            raise PresentationError("Notification permission denied", tag=options.tag)
        notification = DisplayedNotification(title=title, options=options)
        # Same tag replaces the visible notification instead of stacking.
        self._visible = [n for n in self._visible if n.tag != options.tag]
        self._visible.append(notification)
        self.shown.append(notification)
        return notification

    async def close_notification(self, notification: DisplayedNotification) -> None:
        if self.fail_close:
            raise PresentationError("Notification could not be closed", tag=notification.tag)
        notification.closed = True
        self._visible = [n for n in self._visible if n is not notification]

    async def get_notifications(self, tag: str | None = None) -> list[DisplayedNotification]:
        if tag is None:
            return list(self._visible)
        return [n for n in self._visible if n.tag == tag]

    async def skip_waiting(self) -> None:
        if self.fail_skip_waiting:
            raise RegistrationError("Skip waiting rejected")
        self.skip_waiting_count += 1


def create_in_memory_host(
    origin: str = "http://localhost:3000",
    *,
    windows: list[str] | None = None,
    caches: list[str] | None = None,
    can_open: bool = True,
) -> Host:
    """
    Build a Host from plain values.

    Usage:
        host = create_in_memory_host(
            windows=["http://localhost:3000/inventory"],
            caches=["wetdry-erp-v0", "wetdry-erp-v1"],
        )
    """
    return Host(
        origin=origin,
        caches=InMemoryCacheStorage(caches),
        clients=InMemoryClients(
            origin,
            [InMemoryWindowClient(url) for url in (windows or [])],
            can_open=can_open,
        ),
        registration=InMemoryRegistration(),
    )
