"""Tests for the realtime push channel routing table."""

from __future__ import annotations

import logging

import anyio
import pytest

from app.infrastructure.notifications import RealtimePushChannel

pytestmark = pytest.mark.anyio

PAYLOAD = {"id": "n1", "title": "Hi", "message": "Hello", "type": "general", "createdAt": None}


async def test_publish_without_sessions_is_a_no_op():
    channel = RealtimePushChannel()

    assert channel.publish("user-1", PAYLOAD) == 0
    assert channel.connected_session_count("user-1") == 0


async def test_publish_reaches_every_session_of_the_user():
    channel = RealtimePushChannel()
    first = channel.subscribe("session-a", "user-1")
    second = channel.subscribe("session-b", "user-1")
    other = channel.subscribe("session-c", "user-2")

    delivered = channel.publish("user-1", PAYLOAD)

    assert delivered == 2
    assert first.receive_nowait() == PAYLOAD
    assert second.receive_nowait() == PAYLOAD
    with pytest.raises(anyio.WouldBlock):
        other.receive_nowait()


async def test_full_queue_drops_the_message(caplog):
    channel = RealtimePushChannel(queue_size=1)
    stream = channel.subscribe("session-a", "user-1")

    assert channel.publish("user-1", {"id": "first"}) == 1
    with caplog.at_level(logging.WARNING):
        assert channel.publish("user-1", {"id": "second"}) == 0

    assert stream.receive_nowait() == {"id": "first"}
    assert "dropping message" in caplog.text
    assert channel.connected_session_count("user-1") == 1


async def test_resubscribing_moves_the_session_to_the_new_user():
    channel = RealtimePushChannel()
    stream = channel.subscribe("session-a", "user-1")

    moved = channel.subscribe("session-a", "user-2")

    assert moved is stream
    assert channel.publish("user-1", PAYLOAD) == 0
    assert channel.publish("user-2", PAYLOAD) == 1
    assert channel.connected_session_count("user-1") == 0


async def test_unsubscribe_closes_the_session_queue():
    channel = RealtimePushChannel()
    stream = channel.subscribe("session-a", "user-1")

    channel.unsubscribe("session-a", "user-1")

    assert channel.publish("user-1", PAYLOAD) == 0
    with pytest.raises(anyio.EndOfStream):
        stream.receive_nowait()


async def test_unsubscribe_for_another_user_is_ignored():
    channel = RealtimePushChannel()
    channel.subscribe("session-a", "user-1")

    channel.unsubscribe("session-a", "user-2")

    assert channel.connected_session_count("user-1") == 1


async def test_closed_receiver_is_pruned_on_publish():
    channel = RealtimePushChannel()
    stream = channel.subscribe("session-a", "user-1")
    stream.close()

    assert channel.publish("user-1", PAYLOAD) == 0
    assert channel.connected_session_count("user-1") == 0


async def test_publish_many_deduplicates_users():
    channel = RealtimePushChannel()
    stream = channel.subscribe("session-a", "user-1")
    channel.subscribe("session-b", "user-2")

    delivered = channel.publish_many(["user-1", "user-2", "user-1", ""], PAYLOAD)

    assert delivered == 2
    stream.receive_nowait()
    with pytest.raises(anyio.WouldBlock):
        stream.receive_nowait()


def test_queue_size_must_be_positive():
    with pytest.raises(ValueError):
        RealtimePushChannel(queue_size=0)


async def test_close_releases_both_ends_of_every_queue():
    channel = RealtimePushChannel()
    first = channel.subscribe("session-a", "user-1")
    second = channel.subscribe("session-b", "user-2")

    channel.close()
    channel.close()

    for stream in (first, second):
        with pytest.raises(anyio.ClosedResourceError):
            stream.receive_nowait()
    assert channel.publish("user-1", PAYLOAD) == 0
    assert channel.connected_session_count("user-2") == 0
