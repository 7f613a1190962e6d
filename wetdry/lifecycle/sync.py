"""
Background sync hook.

Reserved for syncing notification reads that were queued while offline.
Today it only logs; there is no queue, retry, or backoff behind it.
"""

from __future__ import annotations

import logging

from wetdry.core.events import EventType, SyncEvent
from wetdry.core.types import HandlerResult, Outcome

logger = logging.getLogger(__name__)


class BackgroundSync:
    def __init__(self, tag: str = "sync-notifications") -> None:
        self.tag = tag

    async def handle(self, event: SyncEvent) -> HandlerResult:
        result = HandlerResult(event_type=EventType.SYNC)
        if event.tag != self.tag:
            logger.debug(f"Ignoring sync tag {event.tag!r}")
            return result
        logger.info("Syncing notifications...")
        await self.sync_notifications()
        result.record(Outcome.OK)
        return result

    async def sync_notifications(self) -> None:
        logger.info("Notification sync complete")
