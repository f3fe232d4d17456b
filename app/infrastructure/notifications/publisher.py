"""Utility helpers to push notifications to realtime subscribers."""

from __future__ import annotations

from typing import Any

from app.domain.entities import Notification

NOTIFICATION_EVENT = "notification"


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the realtime payload representation for ``notification``.

    Clients listen for exactly these keys.
    """

    return {
        "id": notification.id,
        "title": notification.title,
        "message": notification.message,
        "type": notification.type,
        "createdAt": notification.created_at.isoformat()
        if notification.created_at
        else None,
    }


def serialize_notification_detail(notification: Notification) -> dict[str, Any]:
    """Return the full JSON representation used by the websocket ``init`` frame."""

    payload = serialize_notification(notification)
    payload.update(
        {
            "userId": notification.user_id,
            "data": dict(notification.data or {}),
            "isRead": notification.is_read,
        }
    )
    return payload


def notification_event(payload: dict[str, Any]) -> dict[str, Any]:
    """Wrap a realtime payload in the websocket envelope."""

    return {"event": NOTIFICATION_EVENT, "data": payload}


__all__ = [
    "NOTIFICATION_EVENT",
    "notification_event",
    "serialize_notification",
    "serialize_notification_detail",
]
