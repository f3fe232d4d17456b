"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Union

from pydantic import BaseModel, Field

from app.domain.entities import NOTIFICATION_TYPE_GENERAL

DataValue = Union[str, int, float, bool, None]


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: str
    user_id: str
    title: str
    message: str
    type: str
    data: dict[str, DataValue] = Field(default_factory=dict)
    is_read: bool
    email_sent: bool
    push_sent: bool
    created_at: datetime
    updated_at: datetime | None = None


class PaginationRead(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class NotificationPage(BaseModel):
    """One page of a user's notifications, newest first."""

    data: list[NotificationRead]
    pagination: PaginationRead


class UnreadCountRead(BaseModel):
    unread_count: int


class UpdatedCountRead(BaseModel):
    updated: int


class DeletedCountRead(BaseModel):
    deleted: int


class NotificationStatsRead(BaseModel):
    total: int
    unread: int
    by_type: dict[str, int]
    last_24_hours: int


# Trigger bodies leave every field optional so that missing values reach the
# dispatcher and come back as a 400 naming the field.


class RequestReceivedTrigger(BaseModel):
    owner_id: str | None = None
    requester_name: str | None = None
    book_title: str | None = None
    request_type: str | None = None
    request_id: str | None = None


class RequestDecisionTrigger(BaseModel):
    requester_id: str | None = None
    book_title: str | None = None
    request_type: str | None = None
    request_id: str | None = None


class BookReturnedTrigger(BaseModel):
    owner_id: str | None = None
    returner_name: str | None = None
    book_title: str | None = None
    request_id: str | None = None


class DueDateTrigger(BaseModel):
    borrower_id: str | None = None
    book_title: str | None = None
    due_date: str | None = None
    request_id: str | None = None


class BulkNotificationTrigger(BaseModel):
    user_ids: list[str] = Field(default_factory=list)
    title: str | None = None
    message: str | None = None
    type: str = NOTIFICATION_TYPE_GENERAL


class BulkNotificationResult(BaseModel):
    sent: int
    notification_ids: list[str]


__all__ = [
    "BookReturnedTrigger",
    "BulkNotificationResult",
    "BulkNotificationTrigger",
    "DeletedCountRead",
    "DueDateTrigger",
    "NotificationPage",
    "NotificationRead",
    "NotificationStatsRead",
    "PaginationRead",
    "RequestDecisionTrigger",
    "RequestReceivedTrigger",
    "UnreadCountRead",
    "UpdatedCountRead",
]
