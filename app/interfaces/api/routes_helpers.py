"""Helper utilities shared across API route handlers."""

import math

from app.domain.entities import Notification
from app.interfaces.api.schemas import NotificationRead, PaginationRead


def notification_to_schema(notification: Notification) -> NotificationRead:
    """Return the API representation of ``notification``."""

    return NotificationRead(
        id=notification.id or "",
        user_id=notification.user_id,
        title=notification.title,
        message=notification.message,
        type=notification.type,
        data=notification.data or {},
        is_read=notification.is_read,
        email_sent=notification.email_sent,
        push_sent=notification.push_sent,
        created_at=notification.created_at,
        updated_at=notification.updated_at,
    )


def build_pagination(*, total: int, page: int, limit: int) -> PaginationRead:
    """Describe one page of ``total`` results split into pages of ``limit``."""

    return PaginationRead(total=total, page=page, limit=limit, pages=math.ceil(total / limit))
