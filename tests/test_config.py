"""Tests for the application settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.config import Settings


@pytest.fixture(autouse=True)
def clear_sendgrid_env(monkeypatch):
    monkeypatch.delenv("SENDGRID_API_KEY", raising=False)
    monkeypatch.delenv("SENDGRID_SENDER", raising=False)


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.app_timezone == "UTC"
    assert settings.email_timeout_seconds == 10
    assert settings.retry_lookback_days == 7
    assert settings.cleanup_max_age_days == 30
    assert settings.email_configured is False


def test_sendgrid_key_requires_sender():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, sendgrid_api_key="SG.key")


def test_sendgrid_pair_enables_email():
    settings = Settings(
        _env_file=None, sendgrid_api_key="SG.key", sendgrid_sender="noreply@example.com"
    )

    assert settings.email_configured is True


def test_values_are_read_from_the_environment(monkeypatch):
    monkeypatch.setenv("PUSH_QUEUE_SIZE", "5")
    monkeypatch.setenv("USER_EMAILS", '{"user-1": "a@example.com"}')

    settings = Settings(_env_file=None)

    assert settings.push_queue_size == 5
    assert settings.user_emails == {"user-1": "a@example.com"}
