"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Iterable

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from app.domain.entities import NOTIFICATION_TYPES, Notification, NotificationStats
from app.infrastructure.models import NotificationModel
from app.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_naive_datetime,
)


class NotificationRepository:
    """Provide CRUD operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, notification_id: str) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model else None

    def create(self, notification: Notification) -> Notification:
        model = NotificationModel()
        self._apply_entity_to_model(model, notification)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def list_for_user(
        self,
        user_id: str,
        *,
        offset: int = 0,
        limit: int | None = 20,
    ) -> Sequence[Notification]:
        query = self._newest_first(
            self.session.query(NotificationModel).filter(
                NotificationModel.user_id == user_id
            )
        )
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def list_unread_for_user(
        self, user_id: str, *, limit: int | None = 50
    ) -> Sequence[Notification]:
        query = self._newest_first(
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.is_read.is_(False))
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def count_for_user(self, user_id: str) -> int:
        return (
            self.session.query(func.count(NotificationModel.id))
            .filter(NotificationModel.user_id == user_id)
            .scalar()
            or 0
        )

    def count_unread(self, user_id: str) -> int:
        return (
            self.session.query(func.count(NotificationModel.id))
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.is_read.is_(False))
            .scalar()
            or 0
        )

    def list_by_type(self, user_id: str, notification_type: str) -> Sequence[Notification]:
        query = self._newest_first(
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.type == notification_type)
        )
        return [self._to_entity(model) for model in query.all()]

    def mark_as_read(self, notification_id: str) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        if model is None:
            return None
        if not model.is_read:
            model.is_read = True
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        return self._to_entity(model)

    def mark_all_as_read(self, user_id: str) -> int:
        updated = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.is_read.is_(False))
            .update(
                {
                    NotificationModel.is_read: True,
                    NotificationModel.updated_at: now_in_app_naive_datetime(),
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return updated

    def update_delivery_flags(
        self,
        notification_id: str,
        *,
        email_sent: bool | None = None,
        push_sent: bool | None = None,
    ) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        if model is None:
            return None
        if email_sent is not None:
            model.email_sent = email_sent
        if push_sent is not None:
            model.push_sent = push_sent
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def delete(self, notification_id: str) -> bool:
        deleted = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.id == notification_id)
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return bool(deleted)

    def delete_for_user(self, user_id: str) -> int:
        deleted = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return deleted

    def delete_many(self, notification_ids: Iterable[str]) -> int:
        ids = [notification_id for notification_id in notification_ids if notification_id]
        if not ids:
            return 0
        deleted = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.id.in_(ids))
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return deleted

    def list_older_than(
        self, cutoff: datetime, *, only_read: bool
    ) -> Sequence[Notification]:
        query = self.session.query(NotificationModel).filter(
            NotificationModel.created_at < ensure_app_naive_datetime(cutoff)
        )
        if only_read:
            query = query.filter(NotificationModel.is_read.is_(True))
        query = query.order_by(NotificationModel.created_at.asc())
        return [self._to_entity(model) for model in query.all()]

    def list_unsent_email(
        self, since: datetime, *, limit: int | None = 100
    ) -> Sequence[Notification]:
        query = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.email_sent.is_(False))
            .filter(NotificationModel.created_at >= ensure_app_naive_datetime(since))
            .order_by(NotificationModel.created_at.asc(), NotificationModel.id.asc())
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def stats(self, since: datetime) -> NotificationStats:
        total = self.session.query(func.count(NotificationModel.id)).scalar() or 0
        unread = (
            self.session.query(func.count(NotificationModel.id))
            .filter(NotificationModel.is_read.is_(False))
            .scalar()
            or 0
        )
        recent = (
            self.session.query(func.count(NotificationModel.id))
            .filter(NotificationModel.created_at >= ensure_app_naive_datetime(since))
            .scalar()
            or 0
        )
        by_type = {notification_type: 0 for notification_type in NOTIFICATION_TYPES}
        rows = (
            self.session.query(NotificationModel.type, func.count(NotificationModel.id))
            .group_by(NotificationModel.type)
            .all()
        )
        for notification_type, count in rows:
            by_type[notification_type] = count
        return NotificationStats(
            total=total, unread=unread, by_type=by_type, last_24_hours=recent
        )

    @staticmethod
    def _newest_first(query: Query[NotificationModel]) -> Query[NotificationModel]:
        return query.order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        )

    @staticmethod
    def _apply_entity_to_model(
        model: NotificationModel, notification: Notification
    ) -> None:
        created_at = (
            ensure_app_naive_datetime(notification.created_at)
            or now_in_app_naive_datetime()
        )
        if notification.id:
            model.id = notification.id
        model.user_id = notification.user_id
        model.title = notification.title
        model.message = notification.message
        model.type = notification.type
        model.data = dict(notification.data or {})
        model.is_read = notification.is_read
        model.email_sent = notification.email_sent
        model.push_sent = notification.push_sent
        model.created_at = created_at
        model.updated_at = created_at

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            title=model.title,
            message=model.message,
            type=model.type,
            data=dict(model.data or {}),
            is_read=bool(model.is_read),
            email_sent=bool(model.email_sent),
            push_sent=bool(model.push_sent),
            created_at=ensure_app_timezone(model.created_at),
            updated_at=ensure_app_timezone(model.updated_at),
        )


__all__ = ["NotificationRepository"]
