"""
Push payload normalization.

Turns whatever the push service delivered (nothing, plain text, or JSON
with any subset of fields) into a complete NotificationRecord. This never
raises: presentation always proceeds with best-effort content.

Fallback order:
    1. JSON object → shallow merge onto defaults
    2. Other JSON values (null, numbers, strings, arrays) → full defaults
    3. Not JSON → payload text becomes the body
    4. Unreadable payload → full defaults
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable

from wetdry.core.config import NotificationDefaults
from wetdry.core.errors import PayloadDecodeError
from wetdry.core.types import Outcome
from wetdry.notifications.base import ActionSpec, NotificationRecord

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("title", "body", "icon", "badge")


def _now_ms() -> int:
    return int(time.time() * 1000)


class PushMessageData:
    """
    The body of one push message.

    Usage:
        message = PushMessageData(b'{"title": "Low stock"}')
        payload = message.json()   # raises PayloadDecodeError if not JSON
        text = message.text()      # raises PayloadDecodeError if not UTF-8
    """

    def __init__(self, raw: bytes | str) -> None:
        self._raw = raw

    @property
    def empty(self) -> bool:
        return len(self._raw) == 0

    def text(self) -> str:
        if isinstance(self._raw, str):
            return self._raw
        try:
            return self._raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise PayloadDecodeError(f"Push payload is not valid UTF-8: {e}") from e

    def json(self) -> Any:
        text = self.text()
        try:
            return json.loads(text)
        except (ValueError, RecursionError) as e:
            # ValueError also covers integers past the digit limit.
            raise PayloadDecodeError(f"Push payload is not JSON: {e}") from e


def default_record(defaults: NotificationDefaults | None = None) -> NotificationRecord:
    """A record made only of defaults."""
    d = defaults or NotificationDefaults()
    return NotificationRecord(
        title=d.title,
        body=d.body,
        icon=d.icon,
        badge=d.badge,
        tag=d.tag,
        priority=d.priority,
        data={"url": d.url},
        actions=[],
    )


def normalize(
    data: PushMessageData | bytes | str | None,
    defaults: NotificationDefaults | None = None,
    *,
    clock: Callable[[], int] = _now_ms,
) -> tuple[NotificationRecord, Outcome]:
    """
    Build a NotificationRecord from a raw push body.

    Returns the record and OK, or DECODE_FAILED when the body was not a
    JSON object (the record then carries the text body or pure defaults).
    """
    defaults = defaults or NotificationDefaults()
    record = default_record(defaults)

    if data is None:
        return record, Outcome.OK
    message = data if isinstance(data, PushMessageData) else PushMessageData(data)
    if message.empty:
        return record, Outcome.OK

    try:
        payload = message.json()
    except PayloadDecodeError as e:
        logger.error(f"Error parsing push data: {e}")
        try:
            text = message.text()
        except PayloadDecodeError as e2:
            logger.error(f"Error reading push text: {e2}")
            return record, Outcome.DECODE_FAILED
        if text.strip():
            record.body = text
        return record, Outcome.DECODE_FAILED

    if not isinstance(payload, dict):
        logger.warning(f"Push data is JSON {type(payload).__name__}, not an object; using defaults")
        return record, Outcome.DECODE_FAILED

    _merge(record, payload, defaults, clock)
    logger.debug(f"Push data: title={record.title!r} tag={record.tag!r} priority={record.priority!r}")
    return record, Outcome.OK


# ━━━ Internals ━━━


def _merge(
    record: NotificationRecord,
    payload: dict[str, Any],
    defaults: NotificationDefaults,
    clock: Callable[[], int],
) -> None:
    """Shallow merge of payload fields onto a default record (mutates record)."""
    for name in _TEXT_FIELDS:
        value = payload.get(name)
        if isinstance(value, str) and value:
            setattr(record, name, value)

    if "tag" in payload:
        tag = payload["tag"]
        # An explicit blank tag would collapse unrelated notifications.
        record.tag = tag if isinstance(tag, str) and tag else f"notification-{clock()}"

    if "priority" in payload:
        priority = payload["priority"]
        record.priority = "" if priority is None else str(priority)

    if isinstance(payload.get("data"), dict):
        record.data = dict(payload["data"])
    url = record.data.get("url")
    if not isinstance(url, str) or not url:
        record.data["url"] = defaults.url

    actions = payload.get("actions")
    if isinstance(actions, list):
        record.actions = [a for a in (_parse_action(raw) for raw in actions) if a]


def _parse_action(raw: Any) -> ActionSpec | None:
    if not isinstance(raw, dict):
        logger.debug(f"Skipping malformed action: {raw!r}")
        return None
    action = raw.get("action")
    if not isinstance(action, str) or not action:
        logger.debug(f"Skipping action without id: {raw!r}")
        return None
    title = raw.get("title")
    icon = raw.get("icon")
    return ActionSpec(
        action=action,
        title=title if isinstance(title, str) and title else action,
        icon=icon if isinstance(icon, str) and icon else None,
    )
