"""Endpoints used by the request workflow to trigger notifications."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from app.domain.entities import Notification
from app.domain.exceptions import ValidationError
from app.interfaces.api.dependencies import get_services, to_http_error
from app.interfaces.api.routes_helpers import notification_to_schema
from app.interfaces.api.schemas import (
    BookReturnedTrigger,
    BulkNotificationResult,
    BulkNotificationTrigger,
    DueDateTrigger,
    NotificationRead,
    RequestDecisionTrigger,
    RequestReceivedTrigger,
)
from app.services import NotificationServices

router = APIRouter(prefix="/notifications/trigger", tags=["notification triggers"])


def _request_data(request_id: str | None) -> dict[str, str]:
    return {"requestId": request_id} if request_id else {}


@router.post(
    "/request-received",
    response_model=NotificationRead,
    status_code=status.HTTP_201_CREATED,
)
async def trigger_request_received(
    body: RequestReceivedTrigger,
    services: NotificationServices = Depends(get_services),
) -> NotificationRead:
    try:
        notification = await services.dispatcher.request_received(
            body.owner_id,
            body.requester_name,
            body.book_title,
            body.request_type,
            _request_data(body.request_id),
        )
    except ValidationError as exc:
        raise to_http_error(exc) from exc
    return notification_to_schema(notification)


@router.post("/approved", response_model=NotificationRead, status_code=status.HTTP_201_CREATED)
async def trigger_request_approved(
    body: RequestDecisionTrigger,
    services: NotificationServices = Depends(get_services),
) -> NotificationRead:
    try:
        notification = await services.dispatcher.request_approved(
            body.requester_id,
            body.book_title,
            body.request_type,
            _request_data(body.request_id),
        )
    except ValidationError as exc:
        raise to_http_error(exc) from exc
    return notification_to_schema(notification)


@router.post("/rejected", response_model=NotificationRead, status_code=status.HTTP_201_CREATED)
async def trigger_request_rejected(
    body: RequestDecisionTrigger,
    services: NotificationServices = Depends(get_services),
) -> NotificationRead:
    try:
        notification = await services.dispatcher.request_rejected(
            body.requester_id,
            body.book_title,
            body.request_type,
            _request_data(body.request_id),
        )
    except ValidationError as exc:
        raise to_http_error(exc) from exc
    return notification_to_schema(notification)


@router.post("/returned", response_model=NotificationRead, status_code=status.HTTP_201_CREATED)
async def trigger_book_returned(
    body: BookReturnedTrigger,
    services: NotificationServices = Depends(get_services),
) -> NotificationRead:
    try:
        notification = await services.dispatcher.book_returned(
            body.owner_id,
            body.returner_name,
            body.book_title,
            _request_data(body.request_id),
        )
    except ValidationError as exc:
        raise to_http_error(exc) from exc
    return notification_to_schema(notification)


@router.post("/due-date", response_model=NotificationRead, status_code=status.HTTP_201_CREATED)
async def trigger_due_date_reminder(
    body: DueDateTrigger,
    services: NotificationServices = Depends(get_services),
) -> NotificationRead:
    try:
        notification = await services.dispatcher.due_date_reminder(
            body.borrower_id,
            body.book_title,
            body.due_date,
            _request_data(body.request_id),
        )
    except ValidationError as exc:
        raise to_http_error(exc) from exc
    return notification_to_schema(notification)


@router.post("/bulk", response_model=BulkNotificationResult, status_code=status.HTTP_201_CREATED)
async def trigger_bulk_notification(
    body: BulkNotificationTrigger,
    services: NotificationServices = Depends(get_services),
) -> BulkNotificationResult:
    """Send the same notification to several users, without email."""

    if not body.user_ids:
        raise to_http_error(ValidationError("user_ids is required", field="user_ids"))
    try:
        notifications: list[Notification] = await services.dispatcher.send_bulk(
            body.user_ids, body.title, body.message, body.type
        )
    except ValidationError as exc:
        raise to_http_error(exc) from exc
    return BulkNotificationResult(
        sent=len(notifications),
        notification_ids=[notification.id for notification in notifications if notification.id],
    )


__all__ = ["router"]
