"""
NotificationPresenter — displays one OS notification per push.

Presentation is best-effort and terminal: the call is awaited, success or
failure is logged, and a failure is never retried or raised.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from wetdry.core.types import Effect, Outcome, ShowNotification
from wetdry.host.base import Registration
from wetdry.notifications.base import NotificationOptions, NotificationRecord
from wetdry.notifications.priority import presentation_for

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def build_options(record: NotificationRecord, timestamp_ms: int) -> NotificationOptions:
    """Final host options for a record, stamped with presentation time."""
    presentation = presentation_for(record.priority)
    return NotificationOptions(
        body=record.body,
        icon=record.icon,
        badge=record.badge,
        tag=record.tag,
        vibrate=list(presentation.vibrate),
        data={**record.data, "url": record.url, "timestamp": timestamp_ms},
        actions=list(record.actions),
        require_interaction=presentation.require_interaction,
        renotify=True,
        silent=presentation.silent,
    )


def plan_push(record: NotificationRecord, timestamp_ms: int) -> list[Effect]:
    return [ShowNotification(title=record.title, options=build_options(record, timestamp_ms))]


class NotificationPresenter:
    """
    Shows normalized records through the host registration.

    Usage:
        presenter = NotificationPresenter(host.registration)
        outcome = await presenter.present(record)
    """

    def __init__(
        self,
        registration: Registration,
        *,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._registration = registration
        self._clock = clock

    def plan(self, record: NotificationRecord) -> list[Effect]:
        return plan_push(record, self._clock())

    async def present(self, record: NotificationRecord) -> Outcome:
        outcome = Outcome.OK
        for effect in self.plan(record):
            outcome = await self.show(effect)
        return outcome

    async def show(self, effect: ShowNotification) -> Outcome:
        try:
            await self._registration.show_notification(effect.title, effect.options)
        except Exception as e:
            logger.error(f"Failed to show notification {effect.options.tag!r}: {e}")
            return Outcome.PRESENT_FAILED
        logger.info(f"Notification shown successfully: {effect.options.tag!r}")
        return Outcome.OK
