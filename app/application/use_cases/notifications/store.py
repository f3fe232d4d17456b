"""Asynchronous access to persisted notifications."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta
from functools import partial
from typing import Iterable, TypeVar

import anyio
from sqlalchemy.orm import Session, sessionmaker

from app.domain.entities import Notification, NotificationStats
from app.domain.exceptions import NotFoundError
from app.infrastructure.repositories import NotificationRepository
from app.utils import app_time_before

from .validators import (
    ensure_notification_type,
    ensure_page,
    normalize_notification,
)

T = TypeVar("T")


class NotificationStore:
    """Single source of truth for notification records.

    Each operation opens its own session and commits before returning, so
    every call is individually atomic. The blocking SQLAlchemy work runs on
    a worker thread to keep the event loop free.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    async def create(self, notification: Notification) -> Notification:
        record = normalize_notification(notification)
        return await self._run(lambda repository: repository.create(record))

    async def get(self, notification_id: str) -> Notification:
        found = await self._run(lambda repository: repository.get(notification_id))
        if found is None:
            raise NotFoundError(notification_id)
        return found

    async def list_for_user(
        self, user_id: str, page: int = 1, page_size: int = 20
    ) -> tuple[list[Notification], int]:
        """Return one newest-first page of ``user_id``'s notifications and the total."""

        page, page_size = ensure_page(page, page_size)

        def _query(repository: NotificationRepository) -> tuple[list[Notification], int]:
            items = repository.list_for_user(
                user_id, offset=(page - 1) * page_size, limit=page_size
            )
            return list(items), repository.count_for_user(user_id)

        return await self._run(_query)

    async def list_unread_for_user(
        self, user_id: str, *, limit: int | None = 50
    ) -> list[Notification]:
        return list(
            await self._run(
                lambda repository: repository.list_unread_for_user(user_id, limit=limit)
            )
        )

    async def unread_count(self, user_id: str) -> int:
        return await self._run(lambda repository: repository.count_unread(user_id))

    async def mark_read(self, notification_id: str) -> Notification:
        updated = await self._run(
            lambda repository: repository.mark_as_read(notification_id)
        )
        if updated is None:
            raise NotFoundError(notification_id)
        return updated

    async def mark_all_read(self, user_id: str) -> int:
        return await self._run(lambda repository: repository.mark_all_as_read(user_id))

    async def update_delivery_flags(
        self,
        notification_id: str,
        *,
        email_sent: bool | None = None,
        push_sent: bool | None = None,
    ) -> Notification:
        updated = await self._run(
            lambda repository: repository.update_delivery_flags(
                notification_id, email_sent=email_sent, push_sent=push_sent
            )
        )
        if updated is None:
            raise NotFoundError(notification_id)
        return updated

    async def delete(self, notification_id: str) -> None:
        deleted = await self._run(lambda repository: repository.delete(notification_id))
        if not deleted:
            raise NotFoundError(notification_id)

    async def delete_all_for_user(self, user_id: str) -> int:
        return await self._run(lambda repository: repository.delete_for_user(user_id))

    async def delete_many(self, notification_ids: Iterable[str]) -> int:
        ids = list(notification_ids)
        return await self._run(lambda repository: repository.delete_many(ids))

    async def list_by_type(self, user_id: str, notification_type: str) -> list[Notification]:
        notification_type = ensure_notification_type(notification_type)
        return list(
            await self._run(
                lambda repository: repository.list_by_type(user_id, notification_type)
            )
        )

    async def find_older_than(
        self, cutoff: datetime, only_read: bool = True
    ) -> list[Notification]:
        return list(
            await self._run(
                lambda repository: repository.list_older_than(cutoff, only_read=only_read)
            )
        )

    async def find_unsent_email(
        self, since: datetime, limit: int | None = 100
    ) -> list[Notification]:
        return list(
            await self._run(
                lambda repository: repository.list_unsent_email(since, limit=limit)
            )
        )

    async def stats(self, now: datetime | None = None) -> NotificationStats:
        since = app_time_before(timedelta(hours=24), now=now)
        return await self._run(lambda repository: repository.stats(since))

    async def _run(self, operation: Callable[[NotificationRepository], T]) -> T:
        return await anyio.to_thread.run_sync(partial(self._execute, operation))

    def _execute(self, operation: Callable[[NotificationRepository], T]) -> T:
        with self._session_factory() as session:
            return operation(NotificationRepository(session))


__all__ = ["NotificationStore"]
