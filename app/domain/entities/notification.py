"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Union

NOTIFICATION_TYPE_REQUEST_SENT = "request_sent"
NOTIFICATION_TYPE_REQUEST_APPROVED = "request_approved"
NOTIFICATION_TYPE_REQUEST_REJECTED = "request_rejected"
NOTIFICATION_TYPE_BOOK_RETURNED = "book_returned"
NOTIFICATION_TYPE_DUE_DATE_REMINDER = "due_date_reminder"
NOTIFICATION_TYPE_GENERAL = "general"

NOTIFICATION_TYPES: tuple[str, ...] = (
    NOTIFICATION_TYPE_REQUEST_SENT,
    NOTIFICATION_TYPE_REQUEST_APPROVED,
    NOTIFICATION_TYPE_REQUEST_REJECTED,
    NOTIFICATION_TYPE_BOOK_RETURNED,
    NOTIFICATION_TYPE_DUE_DATE_REMINDER,
    NOTIFICATION_TYPE_GENERAL,
)

USER_ID_MAX_LENGTH = 64
TITLE_MAX_LENGTH = 200
TYPE_MAX_LENGTH = 32

NotificationDataValue = Union[str, int, float, bool, None]


@dataclass
class Notification:
    """Information message delivered to a specific user."""

    id: str | None
    user_id: str
    title: str
    message: str
    type: str
    data: dict[str, NotificationDataValue] = field(default_factory=dict)
    is_read: bool = False
    email_sent: bool = False
    push_sent: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class NotificationStats:
    """Aggregated counters over every stored notification."""

    total: int
    unread: int
    by_type: dict[str, int]
    last_24_hours: int


__all__ = [
    "Notification",
    "NotificationDataValue",
    "NotificationStats",
    "TITLE_MAX_LENGTH",
    "TYPE_MAX_LENGTH",
    "USER_ID_MAX_LENGTH",
    "NOTIFICATION_TYPES",
    "NOTIFICATION_TYPE_REQUEST_SENT",
    "NOTIFICATION_TYPE_REQUEST_APPROVED",
    "NOTIFICATION_TYPE_REQUEST_REJECTED",
    "NOTIFICATION_TYPE_BOOK_RETURNED",
    "NOTIFICATION_TYPE_DUE_DATE_REMINDER",
    "NOTIFICATION_TYPE_GENERAL",
]
