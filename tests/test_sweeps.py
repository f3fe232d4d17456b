"""Tests for the email retry, cleanup and due date sweeps."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from app.application.use_cases.notifications import (
    cleanup_read_notifications,
    retry_unsent_emails,
    send_due_date_reminders,
)
from app.domain.entities import DueLoan
from app.utils import now_in_app_timezone
from conftest import FakeEmailChannel, make_notification

pytestmark = pytest.mark.anyio


class _Loans:
    def __init__(self, loans):
        self.loans = loans
        self.windows = []

    async def list_due_between(self, start, end):
        self.windows.append((start, end))
        return self.loans


async def test_retry_sends_each_pending_email_once(store):
    created = await store.create(make_notification())
    channel = FakeEmailChannel()

    first = await retry_unsent_emails(store, channel)
    second = await retry_unsent_emails(store, channel)

    assert (first.attempted, first.sent, first.failed) == (1, 1, 0)
    assert second.attempted == 0
    assert len(channel.calls) == 1
    assert (await store.get(created.id)).email_sent is True


async def test_retry_ignores_notifications_outside_the_lookback(store):
    await store.create(
        make_notification(created_at=now_in_app_timezone() - timedelta(days=8))
    )
    channel = FakeEmailChannel()

    result = await retry_unsent_emails(store, channel)

    assert result.attempted == 0
    assert channel.calls == []


async def test_retry_counts_failures_and_keeps_flag(store):
    failing = await store.create(make_notification("user-1"))
    raising = await store.create(make_notification("user-2"))

    rejected = await retry_unsent_emails(store, FakeEmailChannel(result=False))
    errored = await retry_unsent_emails(
        store, FakeEmailChannel(error=RuntimeError("mail down"))
    )

    assert (rejected.sent, rejected.failed) == (0, 2)
    assert (errored.sent, errored.failed) == (0, 2)
    assert (await store.get(failing.id)).email_sent is False
    assert (await store.get(raising.id)).email_sent is False


async def test_retry_processes_at_most_limit_records(store):
    for _ in range(3):
        await store.create(make_notification())
    channel = FakeEmailChannel()

    result = await retry_unsent_emails(store, channel, limit=2)

    assert result.attempted == 2
    assert len(channel.calls) == 2


async def test_cleanup_deletes_only_old_read_notifications(store):
    now = now_in_app_timezone()
    old_read = await store.create(make_notification(created_at=now - timedelta(days=31)))
    await store.mark_read(old_read.id)
    old_unread = await store.create(make_notification(created_at=now - timedelta(days=31)))
    recent_read = await store.create(make_notification(created_at=now - timedelta(days=10)))
    await store.mark_read(recent_read.id)

    deleted = await cleanup_read_notifications(store, now=now)

    assert deleted == 1
    remaining, total = await store.list_for_user("user-1")
    assert total == 2
    assert {item.id for item in remaining} == {old_unread.id, recent_read.id}


async def test_cleanup_with_nothing_to_delete(store):
    assert await cleanup_read_notifications(store) == 0


async def test_due_date_reminders_notify_each_loan(dispatcher, store):
    now = now_in_app_timezone()
    provider = _Loans(
        [
            DueLoan("user-1", "Dune", date(2026, 11, 1), request_id="r1"),
            DueLoan("", "Emma", date(2026, 11, 2)),
        ]
    )

    reminded = await send_due_date_reminders(dispatcher, provider, now=now)

    assert reminded == 1
    assert provider.windows == [(now, now + timedelta(days=3))]
    items, _ = await store.list_for_user("user-1")
    assert items[0].type == "due_date_reminder"
    assert items[0].data["requestId"] == "r1"
    assert items[0].data["dueDate"] == "2026-11-01"


class _LoansDueAt:
    """Provider that filters its loans by due time like a real loan query."""

    def __init__(self, loans):
        self.loans = loans

    async def list_due_between(self, start, end):
        return [loan for due_at, loan in self.loans if start <= due_at < end]


async def test_hourly_due_date_runs_remind_each_loan_once(dispatcher, store):
    now = now_in_app_timezone()
    due_at = now + timedelta(days=3) - timedelta(minutes=30)
    provider = _LoansDueAt([(due_at, DueLoan("user-1", "Dune", due_at.date()))])

    reminded = [
        await send_due_date_reminders(
            dispatcher, provider, interval=timedelta(hours=1), now=now + timedelta(hours=tick)
        )
        for tick in range(3)
    ]

    assert reminded == [1, 0, 0]
    _, total = await store.list_for_user("user-1")
    assert total == 1
