"""Session routing table for realtime notification delivery."""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, DefaultDict, Iterable, Set

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 100


@dataclass
class _Session:
    session_id: str
    user_id: str
    send_stream: MemoryObjectSendStream[dict[str, Any]]
    receive_stream: MemoryObjectReceiveStream[dict[str, Any]]


class RealtimePushChannel:
    """Fan notification payloads out to the live sessions of each user.

    Every subscribed session owns a bounded in-memory queue. ``publish`` only
    enqueues, so it never waits on a client; when a session's queue is full the
    message is dropped for that session. Nothing is buffered for users without
    sessions and nothing survives a restart.
    """

    def __init__(self, *, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        if queue_size < 1:
            raise ValueError("queue_size must be a positive integer")
        self._queue_size = queue_size
        self._lock = threading.Lock()
        self._sessions: dict[str, _Session] = {}
        self._sessions_by_user: DefaultDict[str, Set[str]] = defaultdict(set)

    def subscribe(
        self, session_id: str, user_id: str
    ) -> MemoryObjectReceiveStream[dict[str, Any]]:
        """Bind ``session_id`` to ``user_id`` and return its receive stream.

        A session that is already bound to another user is moved, keeping its
        queue. The caller closes the returned stream when the session ends;
        ``unsubscribe`` only ends it with ``EndOfStream``.
        """

        if not session_id or not user_id:
            raise ValueError("session_id and user_id are required")

        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                send_stream, receive_stream = anyio.create_memory_object_stream(
                    max_buffer_size=self._queue_size
                )
                session = _Session(session_id, user_id, send_stream, receive_stream)
                self._sessions[session_id] = session
            elif session.user_id != user_id:
                self._discard_route(session.user_id, session_id)
                session.user_id = user_id
            self._sessions_by_user[user_id].add(session_id)
            return session.receive_stream

    def unsubscribe(self, session_id: str, user_id: str) -> None:
        """Remove ``session_id`` from ``user_id``'s sessions and close its queue."""

        with self._lock:
            session = self._sessions.get(session_id)
            if session is None or session.user_id != user_id:
                return
            self._drop_session(session)

    def publish(self, user_id: str, payload: dict[str, Any]) -> int:
        """Queue ``payload`` for every session of ``user_id``.

        Returns the number of sessions the payload was queued for. Users with
        no sessions are a no-op.
        """

        with self._lock:
            sessions = [
                self._sessions[session_id]
                for session_id in self._sessions_by_user.get(user_id, ())
                if session_id in self._sessions
            ]

        delivered = 0
        for session in sessions:
            try:
                session.send_stream.send_nowait(dict(payload))
            except anyio.WouldBlock:
                logger.warning(
                    "Realtime queue full for session %s of user %s; dropping message",
                    session.session_id,
                    user_id,
                )
            except (anyio.ClosedResourceError, anyio.BrokenResourceError):
                with self._lock:
                    if self._sessions.get(session.session_id) is session:
                        self._drop_session(session)
            else:
                delivered += 1
        return delivered

    def publish_many(self, user_ids: Iterable[str], payload: dict[str, Any]) -> int:
        """Publish ``payload`` once to each distinct user in ``user_ids``."""

        delivered = 0
        seen: Set[str] = set()
        for user_id in user_ids:
            if not user_id or user_id in seen:
                continue
            seen.add(user_id)
            delivered += self.publish(user_id, payload)
        return delivered

    def connected_session_count(self, user_id: str) -> int:
        with self._lock:
            return len(self._sessions_by_user.get(user_id, ()))

    def close(self) -> None:
        """Drop every session, closing both ends of the pending queues."""

        with self._lock:
            for session in list(self._sessions.values()):
                self._drop_session(session)
                session.receive_stream.close()

    def _drop_session(self, session: _Session) -> None:
        self._sessions.pop(session.session_id, None)
        self._discard_route(session.user_id, session.session_id)
        session.send_stream.close()

    def _discard_route(self, user_id: str, session_id: str) -> None:
        sessions = self._sessions_by_user.get(user_id)
        if sessions is None:
            return
        sessions.discard(session_id)
        if not sessions:
            self._sessions_by_user.pop(user_id, None)


__all__ = ["DEFAULT_QUEUE_SIZE", "RealtimePushChannel"]
