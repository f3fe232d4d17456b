"""Tests for the notification store."""

from __future__ import annotations

from datetime import timedelta

import pytest

from app.domain.exceptions import NotFoundError, ValidationError
from app.utils import now_in_app_timezone
from conftest import make_notification

pytestmark = pytest.mark.anyio


async def test_create_assigns_id_and_clears_flags(store):
    """Stored notifications start unread and undelivered."""

    draft = make_notification(data={"bookTitle": "Dune", "copies": 2})
    draft.is_read = True
    draft.email_sent = True

    created = await store.create(draft)

    assert created.id
    assert created.created_at is not None
    assert created.is_read is False
    assert created.email_sent is False
    assert created.push_sent is False
    assert created.data == {"bookTitle": "Dune", "copies": 2}
    assert (await store.get(created.id)) == created


@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        ({"user_id": ""}, "user_id"),
        ({"title": "   "}, "title"),
        ({"message": ""}, "message"),
        ({"notification_type": "party_invite"}, "type"),
        ({"data": {"nested": {"a": 1}}}, "data"),
    ],
)
async def test_create_rejects_invalid_input(store, overrides, field):
    arguments = {"user_id": "user-1"}
    arguments.update(overrides)
    user_id = arguments.pop("user_id")

    with pytest.raises(ValidationError) as exc_info:
        await store.create(make_notification(user_id, **arguments))

    assert exc_info.value.field == field
    assert (await store.stats()).total == 0


async def test_list_for_user_is_newest_first_and_paginated(store):
    now = now_in_app_timezone()
    for offset in range(5):
        await store.create(
            make_notification(
                title=f"Notification {offset}",
                created_at=now - timedelta(minutes=offset),
            )
        )
    await store.create(make_notification("user-2"))

    first_page, total = await store.list_for_user("user-1", page=1, page_size=2)
    last_page, _ = await store.list_for_user("user-1", page=3, page_size=2)

    assert total == 5
    assert [item.title for item in first_page] == ["Notification 0", "Notification 1"]
    assert [item.title for item in last_page] == ["Notification 4"]


async def test_page_beyond_the_end_is_empty(store):
    await store.create(make_notification())

    items, total = await store.list_for_user("user-1", page=5, page_size=20)

    assert items == []
    assert total == 1


async def test_list_for_user_rejects_invalid_page(store):
    with pytest.raises(ValidationError):
        await store.list_for_user("user-1", page=0)


async def test_mark_read_is_idempotent(store):
    created = await store.create(make_notification())

    first = await store.mark_read(created.id)
    second = await store.mark_read(created.id)

    assert first.is_read is True
    assert second.is_read is True
    assert await store.unread_count("user-1") == 0


async def test_mark_read_unknown_id_raises_not_found(store):
    with pytest.raises(NotFoundError) as exc_info:
        await store.mark_read("missing")

    assert str(exc_info.value) == "Notification with id missing not found"


async def test_mark_all_read_only_touches_one_user(store):
    await store.create(make_notification("user-1"))
    await store.create(make_notification("user-1"))
    await store.create(make_notification("user-2"))

    updated = await store.mark_all_read("user-1")

    assert updated == 2
    assert await store.unread_count("user-1") == 0
    assert await store.unread_count("user-2") == 1
    assert await store.mark_all_read("user-1") == 0


async def test_delete_removes_record_and_unknown_id_raises(store):
    created = await store.create(make_notification())

    await store.delete(created.id)

    with pytest.raises(NotFoundError):
        await store.delete(created.id)
    with pytest.raises(NotFoundError):
        await store.get(created.id)


async def test_delete_all_for_user(store):
    await store.create(make_notification("user-1"))
    await store.create(make_notification("user-1"))
    kept = await store.create(make_notification("user-2"))

    assert await store.delete_all_for_user("user-1") == 2
    assert await store.delete_all_for_user("user-1") == 0
    assert (await store.get(kept.id)).user_id == "user-2"


async def test_update_delivery_flags(store):
    created = await store.create(make_notification())

    updated = await store.update_delivery_flags(created.id, push_sent=True)

    assert updated.push_sent is True
    assert updated.email_sent is False
    with pytest.raises(NotFoundError):
        await store.update_delivery_flags("missing", email_sent=True)


async def test_list_by_type_filters_and_validates(store):
    await store.create(make_notification(notification_type="request_sent"))
    await store.create(make_notification(notification_type="general"))

    items = await store.list_by_type("user-1", "request_sent")

    assert [item.type for item in items] == ["request_sent"]
    with pytest.raises(ValidationError):
        await store.list_by_type("user-1", "unknown")


async def test_find_older_than_skips_unread_by_default(store):
    now = now_in_app_timezone()
    old_read = await store.create(make_notification(created_at=now - timedelta(days=40)))
    await store.mark_read(old_read.id)
    old_unread = await store.create(make_notification(created_at=now - timedelta(days=40)))
    await store.create(make_notification(created_at=now))

    read_only = await store.find_older_than(now - timedelta(days=30))
    everything = await store.find_older_than(now - timedelta(days=30), only_read=False)

    assert [item.id for item in read_only] == [old_read.id]
    assert {item.id for item in everything} == {old_read.id, old_unread.id}


async def test_find_unsent_email_respects_window_and_limit(store):
    now = now_in_app_timezone()
    await store.create(make_notification(created_at=now - timedelta(days=10)))
    recent = [
        await store.create(make_notification(created_at=now - timedelta(hours=hours)))
        for hours in (3, 2, 1)
    ]
    await store.update_delivery_flags(recent[1].id, email_sent=True)

    pending = await store.find_unsent_email(now - timedelta(days=7))
    limited = await store.find_unsent_email(now - timedelta(days=7), limit=1)

    assert [item.id for item in pending] == [recent[0].id, recent[2].id]
    assert [item.id for item in limited] == [recent[0].id]


async def test_stats_counts_by_type_and_recency(store):
    now = now_in_app_timezone()
    await store.create(make_notification(notification_type="request_sent"))
    read = await store.create(make_notification(notification_type="general"))
    await store.mark_read(read.id)
    await store.create(
        make_notification("user-2", created_at=now - timedelta(days=2))
    )

    stats = await store.stats(now=now + timedelta(minutes=1))

    assert stats.total == 3
    assert stats.unread == 2
    assert stats.last_24_hours == 2
    assert stats.by_type["general"] == 2
    assert stats.by_type["request_sent"] == 1
    assert stats.by_type["due_date_reminder"] == 0


async def test_create_enforces_column_lengths(store):
    await store.create(make_notification("u" * 64, title="t" * 200))

    with pytest.raises(ValidationError) as user_error:
        await store.create(make_notification("u" * 65))
    with pytest.raises(ValidationError) as title_error:
        await store.create(make_notification(title="t" * 201))

    assert user_error.value.field == "user_id"
    assert str(user_error.value) == "user_id must be at most 64 characters"
    assert title_error.value.field == "title"
    assert (await store.stats()).total == 1


async def test_same_timestamp_listings_fall_back_to_id_order(store):
    created_at = now_in_app_timezone()
    ids = [
        (await store.create(make_notification(created_at=created_at))).id
        for _ in range(3)
    ]

    items, _ = await store.list_for_user("user-1")
    unread = await store.list_unread_for_user("user-1")

    assert [item.id for item in items] == sorted(ids, reverse=True)
    assert [item.id for item in unread] == sorted(ids, reverse=True)
