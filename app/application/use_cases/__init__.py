"""Aggregate application use cases."""

from .notifications import NotificationDispatcher, NotificationStore

__all__ = [
    "NotificationDispatcher",
    "NotificationStore",
]
