"""
WetDry — push-notification agent for the Wet & Dry ERP.

Public API:
    from wetdry import PushWorker, WorkerConfig, create_in_memory_host
"""

__version__ = "1.1.0"

# Core
from wetdry.core.worker import PushWorker
from wetdry.core.config import WorkerConfig
from wetdry.core.events import (
    Event,
    EventType,
    InstallEvent,
    ActivateEvent,
    PushEvent,
    NotificationClickEvent,
    NotificationCloseEvent,
    SyncEvent,
    MessageEvent,
)
from wetdry.core.types import HandlerResult, Outcome

# Notifications
from wetdry.notifications.base import (
    ActionSpec,
    DisplayedNotification,
    NotificationOptions,
    NotificationRecord,
    Priority,
)
from wetdry.notifications.normalizer import normalize

# Host
from wetdry.host.base import Host
from wetdry.host.memory import create_in_memory_host

# Lifecycle
from wetdry.lifecycle.manager import LifecycleState

__all__ = [
    # Core
    "PushWorker",
    "WorkerConfig",
    "Event",
    "EventType",
    "InstallEvent",
    "ActivateEvent",
    "PushEvent",
    "NotificationClickEvent",
    "NotificationCloseEvent",
    "SyncEvent",
    "MessageEvent",
    "HandlerResult",
    "Outcome",
    # Notifications
    "ActionSpec",
    "DisplayedNotification",
    "NotificationOptions",
    "NotificationRecord",
    "Priority",
    "normalize",
    # Host
    "Host",
    "create_in_memory_host",
    # Lifecycle
    "LifecycleState",
]
