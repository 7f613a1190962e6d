"""
Push payload composition — the sending side of the payload contract.

Builds the JSON body the server pushes to the agent: click-through URL
from the entity that triggered the notification, default action buttons
per notification type, a stable tag, and the push-service urgency header
value for the priority.
"""

from __future__ import annotations

import json
import time
from typing import Any

from wetdry.notifications.base import (
    DEFAULT_BADGE,
    DEFAULT_ICON,
    DEFAULT_URL,
    Action,
    ActionSpec,
    Priority,
)

# Push messages older than this are dropped by the push service.
DEFAULT_TTL = 86400

_ENTITY_ROUTES: dict[str, str] = {
    "inventory_item": "/inventory",
    "stock_transaction": "/inventory",
    "material_request": "/inventory",
    "exception": "/exceptions",
    "truck": "/trucks",
    "maintenance": "/trucks",
    "spare_part": "/trucks/parts",
    "production": "/production",
    "user": "/users",
}


def _view(title: str) -> ActionSpec:
    return ActionSpec(action=Action.VIEW.value, title=title)


def _later() -> ActionSpec:
    return ActionSpec(action=Action.DISMISS.value, title="Later")


_DEFAULT_ACTIONS: dict[str, list[ActionSpec]] = {
    # Approvals
    "new_inventory_item": [_view("Review"), _later()],
    "stock_transaction_pending": [_view("Approve"), _later()],
    "material_request_pending": [_view("Review"), _later()],
    # Alerts
    "low_stock_alert": [_view("View Stock")],
    "silo_level_critical": [_view("Check Silo")],
    "material_shortage": [_view("View Inventory")],
    # Exceptions
    "new_exception": [_view("View Details")],
    # Maintenance
    "maintenance_due_date": [_view("Schedule")],
    "maintenance_due_mileage": [_view("Schedule")],
    "document_expiring": [_view("View Document")],
}

_URGENCY = {
    Priority.CRITICAL.value: "high",
    Priority.HIGH.value: "high",
    Priority.MEDIUM.value: "normal",
    Priority.LOW.value: "low",
}


def notification_url(entity_type: str | None = None, entity_id: str | None = None) -> str:
    """Click-through URL for the entity a notification is about."""
    if not entity_type:
        return DEFAULT_URL
    if entity_type == "truck" and entity_id:
        return f"/trucks/{entity_id}"
    return _ENTITY_ROUTES.get(entity_type, DEFAULT_URL)


def default_actions(notification_type: str | None = None) -> list[ActionSpec]:
    if not notification_type:
        return []
    return list(_DEFAULT_ACTIONS.get(notification_type, []))


def urgency_for(priority: str | None) -> str:
    """Push-service urgency for a priority. Unknown priorities are "normal"."""
    return _URGENCY.get(priority or "", "normal")


def compose_payload(
    title: str,
    body: str,
    *,
    priority: str = Priority.MEDIUM.value,
    tag: str | None = None,
    icon: str | None = None,
    badge: str | None = None,
    data: dict[str, Any] | None = None,
    actions: list[ActionSpec] | None = None,
    now_ms: int | None = None,
) -> dict[str, Any]:
    """
    Build a push payload dict.

    ``data`` may carry ``type``, ``entityType`` and ``entityId``; they pick
    the tag, URL and action buttons when those are not given explicitly.
    """
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    data = dict(data or {})
    notification_type = data.get("type")

    data["url"] = data.get("url") or notification_url(
        data.get("entityType"), data.get("entityId")
    )
    data["timestamp"] = now_ms

    chosen_actions = actions if actions is not None else default_actions(notification_type)
    return {
        "title": title,
        "body": body,
        "icon": icon or DEFAULT_ICON,
        "badge": badge or DEFAULT_BADGE,
        "tag": tag or notification_type or f"notification-{now_ms}",
        "priority": priority or Priority.MEDIUM.value,
        "data": data,
        "actions": [a.to_dict() for a in chosen_actions],
    }


def encode_payload(payload: dict[str, Any]) -> bytes:
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")
