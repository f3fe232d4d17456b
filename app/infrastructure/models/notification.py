"""SQLAlchemy model for persisted notifications."""

from uuid import uuid4

from sqlalchemy import JSON, Boolean, Column, DateTime, Index, String, Text
from sqlalchemy.sql import expression

from app.domain.entities import TITLE_MAX_LENGTH, TYPE_MAX_LENGTH, USER_ID_MAX_LENGTH
from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime


def _new_notification_id() -> str:
    return uuid4().hex


class NotificationModel(Base):
    """Database representation for user notifications."""

    __tablename__ = "notification"
    __table_args__ = (
        Index("ix_notification_user_read_created", "user_id", "is_read", "created_at"),
        Index("ix_notification_user_type", "user_id", "type"),
    )

    id = Column(String(32), primary_key=True, default=_new_notification_id)
    user_id = Column(String(USER_ID_MAX_LENGTH), nullable=False, index=True)
    title = Column(String(TITLE_MAX_LENGTH), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(TYPE_MAX_LENGTH), nullable=False, index=True)
    data = Column(JSON, nullable=False, default=dict)
    is_read = Column(Boolean, nullable=False, default=False, server_default=expression.false())
    email_sent = Column(Boolean, nullable=False, default=False, server_default=expression.false())
    push_sent = Column(Boolean, nullable=False, default=False, server_default=expression.false())
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime, index=True)
    updated_at = Column(
        DateTime(),
        nullable=False,
        default=now_in_app_naive_datetime,
        onupdate=now_in_app_naive_datetime,
    )


__all__ = ["NotificationModel"]
