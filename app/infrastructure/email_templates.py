"""HTML templates for notification emails."""

from __future__ import annotations

from dataclasses import dataclass
from html import escape

from app.domain.entities import (
    NOTIFICATION_TYPE_BOOK_RETURNED,
    NOTIFICATION_TYPE_DUE_DATE_REMINDER,
    NOTIFICATION_TYPE_GENERAL,
    NOTIFICATION_TYPE_REQUEST_APPROVED,
    NOTIFICATION_TYPE_REQUEST_REJECTED,
    NOTIFICATION_TYPE_REQUEST_SENT,
)


@dataclass(frozen=True)
class EmailTemplate:
    """Per-type decoration around the notification text."""

    label: str
    action_text: str
    action_path: str


GENERIC_TEMPLATE = EmailTemplate(
    label="Notification",
    action_text="Visit Book Swap Platform",
    action_path="/",
)

TEMPLATES: dict[str, EmailTemplate] = {
    NOTIFICATION_TYPE_REQUEST_SENT: EmailTemplate(
        "New Request", "View Requests", "/requests"
    ),
    NOTIFICATION_TYPE_REQUEST_APPROVED: EmailTemplate(
        "Request Approved", "View My Library", "/my-library"
    ),
    NOTIFICATION_TYPE_REQUEST_REJECTED: EmailTemplate(
        "Request Rejected", GENERIC_TEMPLATE.action_text, GENERIC_TEMPLATE.action_path
    ),
    NOTIFICATION_TYPE_BOOK_RETURNED: EmailTemplate(
        "Book Returned", "View Requests", "/requests"
    ),
    NOTIFICATION_TYPE_DUE_DATE_REMINDER: EmailTemplate(
        "Due Date Reminder", "View Borrowed Books", "/my-library"
    ),
    NOTIFICATION_TYPE_GENERAL: GENERIC_TEMPLATE,
}

_STYLES = (
    "<style>"
    "body { font-family: Arial, sans-serif; color: #333; }"
    ".container { max-width: 600px; margin: 0 auto; padding: 20px; }"
    ".header { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);"
    " color: white; padding: 20px; border-radius: 5px 5px 0 0; }"
    ".content { background: #f9f9f9; padding: 20px; border: 1px solid #eee; }"
    ".footer { background: #f0f0f0; padding: 15px; text-align: center; font-size: 12px;"
    " color: #666; border-radius: 0 0 5px 5px; }"
    ".button { display: inline-block; background: #667eea; color: white; padding: 12px 24px;"
    " text-decoration: none; border-radius: 5px; margin-top: 15px; }"
    ".notification-type { font-size: 12px; color: #eee; margin-top: 5px; }"
    "</style>"
)


def template_for(notification_type: str) -> EmailTemplate:
    """Return the template for ``notification_type``, or the generic one."""

    return TEMPLATES.get(notification_type, GENERIC_TEMPLATE)


def render_notification_email(
    title: str, message: str, notification_type: str, *, base_url: str
) -> str:
    """Render the HTML body of a notification email."""

    template = template_for(notification_type)
    root = base_url.rstrip("/")
    action_url = f"{root}{template.action_path}"
    return "".join(
        (
            "<!DOCTYPE html><html><head>",
            _STYLES,
            "</head><body><div class=\"container\">",
            "<div class=\"header\">",
            f"<h1>{escape(title)}</h1>",
            f"<p class=\"notification-type\">{escape(template.label)}</p>",
            "</div>",
            "<div class=\"content\">",
            f"<p>{escape(message)}</p>",
            "<p>Thank you for using the Book Swap &amp; Lending Platform!</p>",
            f"<a href=\"{escape(action_url, quote=True)}\" class=\"button\">"
            f"{escape(template.action_text)}</a>",
            "</div>",
            "<div class=\"footer\">",
            "<p>Book Swap &amp; Lending Platform</p>",
            f"<p><a href=\"{escape(root, quote=True)}/notifications\">Manage Notifications</a></p>",
            "</div>",
            "</div></body></html>",
        )
    )


__all__ = [
    "EmailTemplate",
    "GENERIC_TEMPLATE",
    "TEMPLATES",
    "render_notification_email",
    "template_for",
]
