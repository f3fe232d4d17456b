"""Public helpers for emitting and managing notifications."""

from .dispatcher import EmailSender, NotificationDispatcher, PushChannel
from .store import NotificationStore
from .sweeps import (
    DueLoanProvider,
    RetrySweepResult,
    cleanup_read_notifications,
    retry_unsent_emails,
    send_due_date_reminders,
)

__all__ = [
    "DueLoanProvider",
    "EmailSender",
    "NotificationDispatcher",
    "NotificationStore",
    "PushChannel",
    "RetrySweepResult",
    "cleanup_read_notifications",
    "retry_unsent_emails",
    "send_due_date_reminders",
]
