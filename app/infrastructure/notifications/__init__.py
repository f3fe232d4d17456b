"""Realtime notification helpers for the infrastructure layer."""

from .manager import DEFAULT_QUEUE_SIZE, RealtimePushChannel
from .publisher import (
    NOTIFICATION_EVENT,
    notification_event,
    serialize_notification,
    serialize_notification_detail,
)

__all__ = [
    "DEFAULT_QUEUE_SIZE",
    "RealtimePushChannel",
    "NOTIFICATION_EVENT",
    "notification_event",
    "serialize_notification",
    "serialize_notification_detail",
]
