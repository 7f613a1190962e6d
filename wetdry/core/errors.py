"""
WetDry exception hierarchy.

Every error in the agent inherits from WetDryError.
Each host capability has its own error class for targeted catching.

Usage:
    try:
        await registration.show_notification(title, options)
    except PresentationError as e:
        # Host refused to display the notification
    except WetDryError as e:
        # Any other agent error
"""


class WetDryError(Exception):
    """Base exception for all WetDry errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


# ━━━ Startup Errors ━━━


class ConfigError(WetDryError):
    """Configuration is invalid, missing, or malformed."""

    pass


class LifecycleError(WetDryError):
    """Illegal lifecycle transition (e.g. activating before install)."""

    def __init__(
        self,
        message: str,
        current: str = "",
        target: str = "",
        details: dict | None = None,
    ):
        self.current = current
        self.target = target
        super().__init__(message, details)


# ━━━ Payload Errors ━━━


class PayloadDecodeError(WetDryError):
    """Push payload could not be read as JSON or text."""

    pass


# ━━━ Host Capability Errors ━━━


class PresentationError(WetDryError):
    """Host failed or refused to display a notification."""

    def __init__(self, message: str, tag: str = "", details: dict | None = None):
        self.tag = tag
        super().__init__(message, details)


class CacheDeleteError(WetDryError):
    """A cache store could not be deleted."""

    def __init__(self, message: str, cache_name: str = "", details: dict | None = None):
        self.cache_name = cache_name
        super().__init__(message, details)


class NavigationError(WetDryError):
    """Navigating, focusing, or opening a window failed."""

    def __init__(self, message: str, url: str = "", details: dict | None = None):
        self.url = url
        super().__init__(message, details)


class ClientsError(WetDryError):
    """Listing or claiming open pages failed."""

    pass


class RegistrationError(WetDryError):
    """The host rejected a registration request such as skip-waiting."""

    pass
