"""Process-lifetime wiring of the notification services."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import Engine

from app.application.use_cases.notifications import (
    DueLoanProvider,
    NotificationDispatcher,
    NotificationStore,
)
from app.config import Settings
from app.infrastructure.database import (
    build_engine,
    build_session_factory,
    initialize_database,
)
from app.infrastructure.email import EmailChannel, MailTransport, SendGridTransport
from app.infrastructure.notifications import RealtimePushChannel
from app.infrastructure.scheduler import NotificationScheduler
from app.infrastructure.user_directory import StaticUserDirectory, UserDirectory

logger = logging.getLogger(__name__)


@dataclass
class NotificationServices:
    """Every collaborator of the notification core, built once at startup."""

    settings: Settings
    engine: Engine
    store: NotificationStore
    push_channel: RealtimePushChannel
    email_channel: EmailChannel
    dispatcher: NotificationDispatcher
    scheduler: NotificationScheduler

    async def start(self) -> None:
        initialize_database(self.engine)
        await self.email_channel.verify()
        if self.settings.scheduler_enabled:
            self.scheduler.start()
        else:
            logger.info("Background sweeps disabled by configuration")

    async def stop(self) -> None:
        await self.scheduler.shutdown()
        self.push_channel.close()
        self.engine.dispose()


def build_services(
    settings: Settings,
    *,
    transport: MailTransport | None = None,
    directory: UserDirectory | None = None,
    due_loan_provider: DueLoanProvider | None = None,
) -> NotificationServices:
    """Construct the services for ``settings``; nothing is started yet."""

    engine = build_engine(settings.database_url)
    store = NotificationStore(build_session_factory(engine))
    push_channel = RealtimePushChannel(queue_size=settings.push_queue_size)
    email_channel = EmailChannel(
        transport or SendGridTransport(settings.sendgrid_api_key, settings.sendgrid_sender),
        directory or StaticUserDirectory(settings.user_emails),
        base_url=settings.app_base_url,
        timeout=settings.email_timeout_seconds,
    )
    dispatcher = NotificationDispatcher(store, push_channel, email_channel)
    scheduler = NotificationScheduler(
        settings,
        store,
        email_channel,
        dispatcher=dispatcher,
        due_loan_provider=due_loan_provider,
    )
    return NotificationServices(
        settings=settings,
        engine=engine,
        store=store,
        push_channel=push_channel,
        email_channel=email_channel,
        dispatcher=dispatcher,
        scheduler=scheduler,
    )


__all__ = ["NotificationServices", "build_services"]
