"""Shared fixtures and test doubles for the notification tests."""

from __future__ import annotations

import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.application.use_cases.notifications import (  # noqa: E402
    NotificationDispatcher,
    NotificationStore,
)
from app.config import Settings  # noqa: E402
from app.domain.entities import Notification  # noqa: E402
from app.infrastructure.database import (  # noqa: E402
    build_engine,
    build_session_factory,
    initialize_database,
)


class FakeTransport:
    """Mail transport that records every hand-off instead of sending it."""

    def __init__(self, *, result: bool = True, delay: float = 0.0) -> None:
        self.result = result
        self.delay = delay
        self.sent: list[tuple[str, str, str]] = []
        self.verified = 0

    def send(self, recipient: str, subject: str, html_content: str) -> bool:
        if self.delay:
            time.sleep(self.delay)
        self.sent.append((recipient, subject, html_content))
        return self.result

    def verify(self) -> bool:
        self.verified += 1
        return self.result


class FakeEmailChannel:
    """Email channel double that counts calls and returns a fixed outcome."""

    def __init__(self, *, result: bool = True, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[tuple[str, str, str, str]] = []

    async def send(
        self, user_id: str, title: str, message: str, notification_type: str
    ) -> bool:
        self.calls.append((user_id, title, message, notification_type))
        if self.error is not None:
            raise self.error
        return self.result


class FakePushChannel:
    """Push channel double reporting a fixed number of reached sessions."""

    def __init__(self, *, delivered: int = 0, error: Exception | None = None) -> None:
        self.delivered = delivered
        self.error = error
        self.published: list[tuple[str, dict[str, Any]]] = []

    def publish(self, user_id: str, payload: dict[str, Any]) -> int:
        self.published.append((user_id, payload))
        if self.error is not None:
            raise self.error
        return self.delivered


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'notifications.db'}",
        scheduler_enabled=False,
        sendgrid_api_key=None,
        sendgrid_sender=None,
        app_base_url="https://books.example.com",
        user_emails={"user-42": "reader@example.com"},
    )


@pytest.fixture
def store(settings: Settings):
    engine = build_engine(settings.database_url)
    initialize_database(engine)
    yield NotificationStore(build_session_factory(engine))
    engine.dispose()


@pytest.fixture
def push_channel() -> FakePushChannel:
    return FakePushChannel()


@pytest.fixture
def email_channel() -> FakeEmailChannel:
    return FakeEmailChannel()


@pytest.fixture
def dispatcher(
    store: NotificationStore,
    push_channel: FakePushChannel,
    email_channel: FakeEmailChannel,
) -> NotificationDispatcher:
    return NotificationDispatcher(store, push_channel, email_channel)


def make_notification(
    user_id: str = "user-1",
    *,
    title: str = "Hello",
    message: str = "A message",
    notification_type: str = "general",
    data: dict[str, Any] | None = None,
    created_at: datetime | None = None,
) -> Notification:
    return Notification(
        id=None,
        user_id=user_id,
        title=title,
        message=message,
        type=notification_type,
        data=data or {},
        created_at=created_at,
    )
