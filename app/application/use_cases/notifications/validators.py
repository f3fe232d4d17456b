"""Validation helpers for notification input."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from app.domain.entities import (
    NOTIFICATION_TYPES,
    TITLE_MAX_LENGTH,
    USER_ID_MAX_LENGTH,
    Notification,
    NotificationDataValue,
)
from app.domain.exceptions import ValidationError

_SCALAR_TYPES = (str, int, float, bool)


def ensure_present(value: Any, field: str, *, max_length: int | None = None) -> str:
    """Return ``value`` as a stripped string or raise ``ValidationError``.

    ``max_length`` mirrors the width of the column the value is stored in.
    """

    if value is None:
        raise ValidationError(f"{field} is required", field=field)
    text = str(value).strip()
    if not text:
        raise ValidationError(f"{field} is required", field=field)
    if max_length is not None and len(text) > max_length:
        raise ValidationError(
            f"{field} must be at most {max_length} characters", field=field
        )
    return text


def ensure_notification_type(value: Any) -> str:
    notification_type = ensure_present(value, "type")
    if notification_type not in NOTIFICATION_TYPES:
        allowed = ", ".join(NOTIFICATION_TYPES)
        raise ValidationError(
            f"type must be one of: {allowed}", field="type"
        )
    return notification_type


def ensure_data(data: Mapping[str, Any] | None) -> dict[str, NotificationDataValue]:
    """Return a copy of ``data`` limited to string keys and scalar values."""

    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValidationError("data must be a mapping", field="data")

    normalized: dict[str, NotificationDataValue] = {}
    for key, value in data.items():
        if not isinstance(key, str) or not key:
            raise ValidationError("data keys must be non-empty strings", field="data")
        if value is not None and not isinstance(value, _SCALAR_TYPES):
            raise ValidationError(
                f"data value for '{key}' must be a string, number or boolean",
                field="data",
            )
        normalized[key] = value
    return normalized


def ensure_page(page: int, page_size: int) -> tuple[int, int]:
    if not isinstance(page, int) or isinstance(page, bool) or page < 1:
        raise ValidationError("page must be a positive integer", field="page")
    if not isinstance(page_size, int) or isinstance(page_size, bool) or page_size < 1:
        raise ValidationError("page_size must be a positive integer", field="page_size")
    return page, page_size


def normalize_notification(notification: Notification) -> Notification:
    """Validate ``notification`` and return a copy with normalized fields."""

    return Notification(
        id=notification.id,
        user_id=ensure_present(
            notification.user_id, "user_id", max_length=USER_ID_MAX_LENGTH
        ),
        title=ensure_present(notification.title, "title", max_length=TITLE_MAX_LENGTH),
        message=ensure_present(notification.message, "message"),
        type=ensure_notification_type(notification.type),
        data=ensure_data(notification.data),
        is_read=False,
        email_sent=False,
        push_sent=False,
        created_at=notification.created_at,
        updated_at=None,
    )


__all__ = [
    "ensure_data",
    "ensure_notification_type",
    "ensure_page",
    "ensure_present",
    "normalize_notification",
]
