"""Translate domain events into stored, pushed and emailed notifications."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Protocol

from app.domain.entities import (
    NOTIFICATION_TYPE_BOOK_RETURNED,
    NOTIFICATION_TYPE_DUE_DATE_REMINDER,
    NOTIFICATION_TYPE_GENERAL,
    NOTIFICATION_TYPE_REQUEST_APPROVED,
    NOTIFICATION_TYPE_REQUEST_REJECTED,
    NOTIFICATION_TYPE_REQUEST_SENT,
    USER_ID_MAX_LENGTH,
    Notification,
)
from app.infrastructure.notifications import serialize_notification

from .store import NotificationStore
from .validators import ensure_data, ensure_present

logger = logging.getLogger(__name__)


class PushChannel(Protocol):
    def publish(self, user_id: str, payload: dict[str, Any]) -> int:
        ...


class EmailSender(Protocol):
    async def send(
        self, user_id: str, title: str, message: str, notification_type: str
    ) -> bool:
        ...


class NotificationDispatcher:
    """Single entry point for creating notifications.

    The record is always stored first; the realtime push and the email are
    attempted afterwards and their failures only show up in the ``push_sent``
    and ``email_sent`` flags. Calling a trigger twice creates two
    notifications.
    """

    def __init__(
        self,
        store: NotificationStore,
        push_channel: PushChannel,
        email_channel: EmailSender,
    ) -> None:
        self._store = store
        self._push_channel = push_channel
        self._email_channel = email_channel

    async def notify(
        self,
        user_id: str,
        title: str,
        message: str,
        notification_type: str = NOTIFICATION_TYPE_GENERAL,
        data: Mapping[str, Any] | None = None,
        want_email: bool = True,
    ) -> Notification:
        notification = await self._store.create(
            Notification(
                id=None,
                user_id=user_id,
                title=title,
                message=message,
                type=notification_type,
                data=data or {},
            )
        )

        notification = await self._push(notification)
        if want_email:
            notification = await self._email(notification)
        return notification

    async def send_bulk(
        self,
        user_ids: list[str],
        title: str,
        message: str,
        notification_type: str = NOTIFICATION_TYPE_GENERAL,
        data: Mapping[str, Any] | None = None,
    ) -> list[Notification]:
        """Notify every distinct user in ``user_ids`` without sending email."""

        recipients: list[str] = []
        for user_id in user_ids:
            candidate = ensure_present(user_id, "user_ids", max_length=USER_ID_MAX_LENGTH)
            if candidate not in recipients:
                recipients.append(candidate)

        notifications = [
            await self.notify(
                recipient, title, message, notification_type, data, want_email=False
            )
            for recipient in recipients
        ]
        logger.info("Sent bulk notification to %d users", len(notifications))
        return notifications

    async def request_received(
        self,
        owner_id: str,
        requester_name: str,
        book_title: str,
        request_type: str,
        data: Mapping[str, Any] | None = None,
    ) -> Notification:
        owner_id = ensure_present(owner_id, "owner_id", max_length=USER_ID_MAX_LENGTH)
        requester_name = ensure_present(requester_name, "requester_name")
        book_title = ensure_present(book_title, "book_title")
        request_type = ensure_present(request_type, "request_type")
        return await self.notify(
            owner_id,
            "New Request Received 📬",
            f'{requester_name} requested to {request_type} your book "{book_title}"',
            NOTIFICATION_TYPE_REQUEST_SENT,
            _merge_data(
                {
                    "bookTitle": book_title,
                    "requesterName": requester_name,
                    "requestType": request_type,
                },
                data,
            ),
        )

    async def request_approved(
        self,
        requester_id: str,
        book_title: str,
        request_type: str,
        data: Mapping[str, Any] | None = None,
    ) -> Notification:
        requester_id = ensure_present(requester_id, "requester_id", max_length=USER_ID_MAX_LENGTH)
        book_title = ensure_present(book_title, "book_title")
        request_type = ensure_present(request_type, "request_type")
        return await self.notify(
            requester_id,
            "Request Approved ✅",
            f'Your {request_type} request for "{book_title}" has been approved!',
            NOTIFICATION_TYPE_REQUEST_APPROVED,
            _merge_data({"bookTitle": book_title, "requestType": request_type}, data),
        )

    async def request_rejected(
        self,
        requester_id: str,
        book_title: str,
        request_type: str,
        data: Mapping[str, Any] | None = None,
    ) -> Notification:
        requester_id = ensure_present(requester_id, "requester_id", max_length=USER_ID_MAX_LENGTH)
        book_title = ensure_present(book_title, "book_title")
        request_type = ensure_present(request_type, "request_type")
        return await self.notify(
            requester_id,
            "Request Rejected ❌",
            f'Your {request_type} request for "{book_title}" has been rejected.',
            NOTIFICATION_TYPE_REQUEST_REJECTED,
            _merge_data({"bookTitle": book_title, "requestType": request_type}, data),
        )

    async def book_returned(
        self,
        owner_id: str,
        returner_name: str,
        book_title: str,
        data: Mapping[str, Any] | None = None,
    ) -> Notification:
        owner_id = ensure_present(owner_id, "owner_id", max_length=USER_ID_MAX_LENGTH)
        returner_name = ensure_present(returner_name, "returner_name")
        book_title = ensure_present(book_title, "book_title")
        return await self.notify(
            owner_id,
            "Book Returned 📚",
            f'{returner_name} has returned your book "{book_title}"',
            NOTIFICATION_TYPE_BOOK_RETURNED,
            _merge_data({"bookTitle": book_title, "returnerName": returner_name}, data),
        )

    async def due_date_reminder(
        self,
        borrower_id: str,
        book_title: str,
        due_date: str | date,
        data: Mapping[str, Any] | None = None,
    ) -> Notification:
        borrower_id = ensure_present(borrower_id, "borrower_id", max_length=USER_ID_MAX_LENGTH)
        book_title = ensure_present(book_title, "book_title")
        due_date_text = ensure_present(_format_due_date(due_date), "due_date")
        return await self.notify(
            borrower_id,
            "Due Date Reminder ⏰",
            f'Your borrowed book "{book_title}" is due on {due_date_text}',
            NOTIFICATION_TYPE_DUE_DATE_REMINDER,
            _merge_data({"bookTitle": book_title, "dueDate": due_date_text}, data),
        )

    async def _push(self, notification: Notification) -> Notification:
        try:
            delivered = self._push_channel.publish(
                notification.user_id, serialize_notification(notification)
            )
        except Exception:
            logger.exception("Realtime push failed for notification %s", notification.id)
            return notification

        if not delivered:
            return notification
        try:
            return await self._store.update_delivery_flags(notification.id, push_sent=True)
        except Exception:
            logger.exception("Could not record push delivery for notification %s", notification.id)
            return notification

    async def _email(self, notification: Notification) -> Notification:
        try:
            sent = await self._email_channel.send(
                notification.user_id,
                notification.title,
                notification.message,
                notification.type,
            )
        except Exception:
            logger.exception("Email channel failed for notification %s", notification.id)
            sent = False

        if not sent:
            logger.info(
                "Email for notification %s not sent; left for the retry sweep",
                notification.id,
            )
            return notification
        try:
            return await self._store.update_delivery_flags(notification.id, email_sent=True)
        except Exception:
            logger.exception(
                "Could not record email delivery for notification %s", notification.id
            )
            return notification


def _format_due_date(due_date: str | date | None) -> str | None:
    if isinstance(due_date, datetime):
        return due_date.date().isoformat()
    if isinstance(due_date, date):
        return due_date.isoformat()
    return due_date


def _merge_data(
    template_data: dict[str, Any], data: Mapping[str, Any] | None
) -> dict[str, Any]:
    merged = dict(template_data)
    merged.update(ensure_data(data))
    return merged


__all__ = ["EmailSender", "NotificationDispatcher", "PushChannel"]
