"""Domain entities exposed by the application."""

from .due_loan import DueLoan
from .notification import (
    NOTIFICATION_TYPE_BOOK_RETURNED,
    NOTIFICATION_TYPE_DUE_DATE_REMINDER,
    NOTIFICATION_TYPE_GENERAL,
    NOTIFICATION_TYPE_REQUEST_APPROVED,
    NOTIFICATION_TYPE_REQUEST_REJECTED,
    NOTIFICATION_TYPE_REQUEST_SENT,
    NOTIFICATION_TYPES,
    Notification,
    NotificationDataValue,
    NotificationStats,
    TITLE_MAX_LENGTH,
    TYPE_MAX_LENGTH,
    USER_ID_MAX_LENGTH,
)

__all__ = [
    "DueLoan",
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
