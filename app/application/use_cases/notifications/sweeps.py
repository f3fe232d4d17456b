"""Background sweeps over stored notifications."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol

from app.domain.entities import DueLoan
from app.utils import app_time_before, now_in_app_timezone

from .dispatcher import EmailSender, NotificationDispatcher
from .store import NotificationStore

logger = logging.getLogger(__name__)

DEFAULT_RETRY_LOOKBACK = timedelta(days=7)
DEFAULT_RETRY_LIMIT = 100
DEFAULT_CLEANUP_MAX_AGE = timedelta(days=30)
DEFAULT_DUE_REMINDER_WINDOW = timedelta(days=3)


@dataclass
class RetrySweepResult:
    """Outcome of one retry sweep run."""

    attempted: int = 0
    sent: int = 0
    failed: int = 0


class DueLoanProvider(Protocol):
    """Source of loans whose due time falls inside ``[start, end)``."""

    async def list_due_between(self, start: datetime, end: datetime) -> Sequence[DueLoan]:
        ...


async def retry_unsent_emails(
    store: NotificationStore,
    email_channel: EmailSender,
    *,
    lookback: timedelta = DEFAULT_RETRY_LOOKBACK,
    limit: int = DEFAULT_RETRY_LIMIT,
    now: datetime | None = None,
) -> RetrySweepResult:
    """Resend email for recent notifications still marked ``email_sent=False``.

    At most ``limit`` records are processed per run. A failure on one record
    is logged and the sweep moves on to the next.
    """

    since = app_time_before(lookback, now=now)
    pending = await store.find_unsent_email(since, limit)
    result = RetrySweepResult(attempted=len(pending))
    logger.info("Resending %d unsent notification emails", len(pending))

    for notification in pending:
        try:
            sent = await email_channel.send(
                notification.user_id,
                notification.title,
                notification.message,
                notification.type,
            )
            if sent:
                await store.update_delivery_flags(notification.id, email_sent=True)
        except Exception:
            logger.exception("Failed to resend email for notification %s", notification.id)
            result.failed += 1
            continue

        if sent:
            result.sent += 1
        else:
            result.failed += 1

    logger.info(
        "Email retry sweep finished: %d sent, %d failed", result.sent, result.failed
    )
    return result


async def cleanup_read_notifications(
    store: NotificationStore,
    *,
    max_age: timedelta = DEFAULT_CLEANUP_MAX_AGE,
    now: datetime | None = None,
) -> int:
    """Delete read notifications created more than ``max_age`` ago.

    Unread notifications are kept whatever their age.
    """

    cutoff = app_time_before(max_age, now=now)
    expired = await store.find_older_than(cutoff, only_read=True)
    deleted = await store.delete_many(notification.id for notification in expired)
    logger.info("Cleaned up %d old notifications", deleted)
    return deleted


async def send_due_date_reminders(
    dispatcher: NotificationDispatcher,
    provider: DueLoanProvider,
    *,
    window: timedelta = DEFAULT_DUE_REMINDER_WINDOW,
    interval: timedelta | None = None,
    now: datetime | None = None,
) -> int:
    """Send a due-date reminder for every loan due within ``window``.

    With ``interval`` set, only loans whose due time entered the window since
    the previous run (``[now + window - interval, now + window)``) are
    reminded, so a job repeating every ``interval`` reminds each loan once.
    Without it the whole window from ``now`` is covered.
    """

    reference = now or now_in_app_timezone()
    end = reference + window
    start = end - interval if interval is not None else reference
    loans = await provider.list_due_between(start, end)
    reminded = 0
    for loan in loans:
        data = {"requestId": loan.request_id} if loan.request_id else None
        try:
            await dispatcher.due_date_reminder(
                loan.borrower_id, loan.book_title, loan.due_date, data
            )
        except Exception:
            logger.exception(
                "Failed to send due date reminder to %s for '%s'",
                loan.borrower_id,
                loan.book_title,
            )
            continue
        reminded += 1

    logger.info("Due date check completed: %d reminders sent", reminded)
    return reminded


__all__ = [
    "DEFAULT_CLEANUP_MAX_AGE",
    "DEFAULT_DUE_REMINDER_WINDOW",
    "DEFAULT_RETRY_LIMIT",
    "DEFAULT_RETRY_LOOKBACK",
    "DueLoanProvider",
    "RetrySweepResult",
    "cleanup_read_notifications",
    "retry_unsent_emails",
    "send_due_date_reminders",
]
