"""Notification email delivery through SendGrid."""

from __future__ import annotations

import json
import logging
from functools import partial
from typing import Any, Protocol

import anyio
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from app.infrastructure.email_templates import render_notification_email
from app.infrastructure.user_directory import UserDirectory

logger = logging.getLogger(__name__)

DEFAULT_EMAIL_TIMEOUT_SECONDS = 10.0


class MailTransport(Protocol):
    """Blocking outbound mail hand-off."""

    def send(self, recipient: str, subject: str, html_content: str) -> bool:
        ...

    def verify(self) -> bool:
        ...


def _decode_error_body(body: Any) -> Any:
    """Turn a raw SendGrid body into parsed JSON, or stripped text if it is not JSON."""

    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if not isinstance(body, str):
        return body
    text = body.strip()
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def _describe_error(error: Any) -> str | None:
    if not isinstance(error, dict) or not error.get("message"):
        return None
    if error.get("field"):
        return f"{error['message']} (field: {error['field']})"
    return str(error["message"])


def _describe_sendgrid_error(body: Any) -> str | None:
    """Summarise a SendGrid error body for the failure log, or ``None`` if empty."""

    payload = _decode_error_body(body)
    if payload is None or payload == "":
        return None
    if isinstance(payload, list):
        return "; ".join(str(item) for item in payload)
    if isinstance(payload, dict):
        errors = payload.get("errors")
        described = [
            text
            for text in map(_describe_error, errors if isinstance(errors, list) else ())
            if text
        ]
        return "; ".join(described) or json.dumps(payload, default=str)
    return str(payload)


def _log_sendgrid_failure(source: Any, *, action: str) -> None:
    """Log a failed SendGrid call using the status and decoded error body."""

    status_code = getattr(source, "status_code", None)
    details = _describe_sendgrid_error(getattr(source, "body", None))

    if status_code and details:
        logger.error("SendGrid %s failed with status %s: %s", action, status_code, details)
    elif status_code:
        logger.error("SendGrid %s failed with status %s", action, status_code)
    elif details:
        logger.error("SendGrid %s failed: %s", action, details)
    elif isinstance(source, Exception):
        logger.error("SendGrid %s failed: %r", action, source)
    else:
        logger.error("SendGrid %s failed without a status code", action)


def _is_success(response: Any) -> bool:
    status_code = getattr(response, "status_code", None)
    return isinstance(status_code, int) and 200 <= status_code < 300


class SendGridTransport:
    """Hand notification emails to the SendGrid Web API."""

    def __init__(self, api_key: str | None, sender: str | None) -> None:
        self._api_key = api_key
        self._sender = sender

    @property
    def configured(self) -> bool:
        return bool(self._api_key and self._sender)

    def send(self, recipient: str, subject: str, html_content: str) -> bool:
        """Send one email; ``True`` only when SendGrid accepted it."""

        if not self.configured:
            logger.info("SendGrid configuration incomplete; skipping email delivery")
            return False

        message = Mail(
            from_email=self._sender,
            to_emails=recipient,
            subject=subject,
            html_content=html_content,
        )

        try:
            response = SendGridAPIClient(self._api_key).send(message)
        except Exception as exc:  # python_http_client raises HTTPError subclasses
            _log_sendgrid_failure(exc, action="send")
            return False

        if not _is_success(response):
            _log_sendgrid_failure(response, action="send")
            return False
        return True

    def verify(self) -> bool:
        """Check the credentials with an authenticated read-only API call."""

        if not self.configured:
            logger.warning("SendGrid configuration incomplete; email notifications disabled")
            return False

        try:
            response = SendGridAPIClient(self._api_key).client.scopes.get()
        except Exception as exc:  # python_http_client raises HTTPError subclasses
            _log_sendgrid_failure(exc, action="verification")
            return False

        if not _is_success(response):
            _log_sendgrid_failure(response, action="verification")
            return False
        return True


class EmailChannel:
    """Best-effort templated email for notifications.

    ``send`` and ``verify`` never raise: every failure, including a transport
    that exceeds ``timeout`` seconds, is logged and reported as ``False``. The
    blocking transport runs on a worker thread.
    """

    def __init__(
        self,
        transport: MailTransport,
        directory: UserDirectory,
        *,
        base_url: str,
        timeout: float = DEFAULT_EMAIL_TIMEOUT_SECONDS,
    ) -> None:
        self._transport = transport
        self._directory = directory
        self._base_url = base_url
        self._timeout = timeout

    async def send(
        self, user_id: str, title: str, message: str, notification_type: str
    ) -> bool:
        try:
            recipient = await self._directory.resolve_email(user_id)
        except Exception:
            logger.exception("Failed to resolve email address for user %s", user_id)
            return False

        if not recipient:
            logger.info("No email address found for user %s", user_id)
            return False

        html_content = render_notification_email(
            title, message, notification_type, base_url=self._base_url
        )
        sent = await self._call_transport(
            partial(self._transport.send, recipient, title, html_content),
            action=f"email to user {user_id}",
        )
        if sent:
            logger.info("Notification email handed off for user %s", user_id)
        return sent

    async def verify(self) -> bool:
        verified = await self._call_transport(
            self._transport.verify, action="mail transport verification"
        )
        if verified:
            logger.info("Email transport verified successfully")
        else:
            logger.warning("Email transport verification failed")
        return verified

    async def _call_transport(self, call: Any, *, action: str) -> bool:
        try:
            with anyio.fail_after(self._timeout):
                result = await anyio.to_thread.run_sync(call, abandon_on_cancel=True)
        except TimeoutError:
            logger.warning("Timed out after %.1fs waiting for %s", self._timeout, action)
            return False
        except Exception:
            logger.exception("Unexpected failure during %s", action)
            return False
        return bool(result)


__all__ = [
    "DEFAULT_EMAIL_TIMEOUT_SECONDS",
    "EmailChannel",
    "MailTransport",
    "SendGridTransport",
]
