"""APScheduler integration for the notification sweeps.

The jobs run inside the application's event loop:

- ``retry_unsent_emails``: resend email for recent notifications whose first
  attempt failed.
- ``cleanup_read_notifications``: prune old read notifications.
- ``send_due_date_reminders``: only registered when a due-loan provider is
  configured.
"""

from __future__ import annotations

import logging
from datetime import timedelta

import anyio
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.application.use_cases.notifications import (
    DueLoanProvider,
    EmailSender,
    NotificationDispatcher,
    NotificationStore,
    RetrySweepResult,
    cleanup_read_notifications,
    retry_unsent_emails,
    send_due_date_reminders,
)
from app.config import Settings

logger = logging.getLogger(__name__)

RETRY_JOB_ID = "retry_unsent_emails"
CLEANUP_JOB_ID = "cleanup_read_notifications"
DUE_REMINDER_JOB_ID = "send_due_date_reminders"

SHUTDOWN_TIMEOUT_SECONDS = 5.0


def build_scheduler() -> AsyncIOScheduler:
    return AsyncIOScheduler(
        timezone="UTC",
        job_defaults={
            "coalesce": True,  # Combine multiple pending executions into one
            "max_instances": 1,  # Only one instance of each job at a time
            "misfire_grace_time": 60,
        },
    )


class NotificationScheduler:
    """Own the background sweeps for the lifetime of the process."""

    def __init__(
        self,
        settings: Settings,
        store: NotificationStore,
        email_channel: EmailSender,
        *,
        dispatcher: NotificationDispatcher | None = None,
        due_loan_provider: DueLoanProvider | None = None,
        scheduler: AsyncIOScheduler | None = None,
    ) -> None:
        self._settings = settings
        self._store = store
        self._email_channel = email_channel
        self._dispatcher = dispatcher
        self._due_loan_provider = due_loan_provider
        self._scheduler = scheduler or build_scheduler()

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def job_ids(self) -> list[str]:
        return [job.id for job in self._scheduler.get_jobs()]

    def setup_jobs(self) -> None:
        """Register every sweep with APScheduler."""

        settings = self._settings
        self._scheduler.add_job(
            func=self.run_retry_sweep,
            trigger=IntervalTrigger(minutes=settings.retry_interval_minutes),
            id=RETRY_JOB_ID,
            name="Resend failed notification emails",
            replace_existing=True,
        )
        self._scheduler.add_job(
            func=self.run_cleanup_sweep,
            trigger=IntervalTrigger(hours=settings.cleanup_interval_hours),
            id=CLEANUP_JOB_ID,
            name="Delete old read notifications",
            replace_existing=True,
        )

        if self._dispatcher is not None and self._due_loan_provider is not None:
            self._scheduler.add_job(
                func=self.run_due_date_reminders,
                trigger=IntervalTrigger(minutes=settings.due_reminder_interval_minutes),
                id=DUE_REMINDER_JOB_ID,
                name="Send due date reminders",
                replace_existing=True,
            )
        else:
            logger.info("No due loan provider configured; due date reminders disabled")

        logger.info("Scheduled %d notification jobs", len(self._scheduler.get_jobs()))

    def start(self) -> None:
        """Start the scheduler; must be called from a running event loop."""

        if self._scheduler.running:
            logger.warning("Notification scheduler is already running")
            return
        if not self._scheduler.get_jobs():
            self.setup_jobs()
        self._scheduler.start()
        logger.info(
            "Notification scheduler started with %d jobs", len(self._scheduler.get_jobs())
        )

    async def shutdown(self) -> None:
        """Stop the scheduler; an in-flight sweep is abandoned.

        APScheduler queues the stop on the event loop, so this yields until the
        scheduler reports that it is no longer running.
        """

        if not self._scheduler.running:
            return
        self._scheduler.shutdown(wait=False)
        with anyio.move_on_after(SHUTDOWN_TIMEOUT_SECONDS):
            while self._scheduler.running:
                await anyio.sleep(0)
        if self._scheduler.running:
            logger.warning(
                "Notification scheduler did not stop within %.1fs", SHUTDOWN_TIMEOUT_SECONDS
            )
        else:
            logger.info("Notification scheduler stopped")

    async def run_retry_sweep(self) -> RetrySweepResult | None:
        try:
            return await retry_unsent_emails(
                self._store,
                self._email_channel,
                lookback=timedelta(days=self._settings.retry_lookback_days),
                limit=self._settings.retry_batch_limit,
            )
        except Exception:
            logger.exception("Email retry sweep failed; retrying on the next run")
            return None

    async def run_cleanup_sweep(self) -> int | None:
        try:
            return await cleanup_read_notifications(
                self._store,
                max_age=timedelta(days=self._settings.cleanup_max_age_days),
            )
        except Exception:
            logger.exception("Notification cleanup sweep failed; retrying on the next run")
            return None

    async def run_due_date_reminders(self) -> int | None:
        if self._dispatcher is None or self._due_loan_provider is None:
            return None
        try:
            return await send_due_date_reminders(
                self._dispatcher,
                self._due_loan_provider,
                window=timedelta(days=self._settings.due_reminder_window_days),
                interval=timedelta(minutes=self._settings.due_reminder_interval_minutes),
            )
        except Exception:
            logger.exception("Due date reminder job failed; retrying on the next run")
            return None


__all__ = [
    "CLEANUP_JOB_ID",
    "DUE_REMINDER_JOB_ID",
    "RETRY_JOB_ID",
    "NotificationScheduler",
    "build_scheduler",
]
