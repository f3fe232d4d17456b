"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./notifications.db",
        description="Database connection URL used by SQLAlchemy",
        min_length=1,
    )
    app_timezone: str = Field(
        default="UTC",
        description="IANA timezone name (or UTC+hh:mm offset) used for timestamps",
    )
    log_level: str = Field(default="INFO", description="Root logging level")
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending notification emails via the REST API",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of notification emails",
        min_length=3,
    )
    email_timeout_seconds: float = Field(
        default=10.0,
        description="Maximum number of seconds to wait for the mail transport",
        gt=0,
    )
    app_base_url: str = Field(
        default="https://bookswap.local",
        description="Base URL used to build links inside email templates",
    )
    push_queue_size: int = Field(
        default=100,
        description="Pending realtime messages kept per session before dropping",
        gt=0,
    )
    scheduler_enabled: bool = Field(
        default=True, description="Start the background sweeps with the application"
    )
    retry_interval_minutes: int = Field(default=60, gt=0)
    retry_lookback_days: int = Field(default=7, gt=0)
    retry_batch_limit: int = Field(default=100, gt=0)
    cleanup_interval_hours: int = Field(default=24, gt=0)
    cleanup_max_age_days: int = Field(default=30, gt=0)
    due_reminder_interval_minutes: int = Field(default=60, gt=0)
    due_reminder_window_days: int = Field(default=3, gt=0)
    user_emails: dict[str, str] = Field(
        default_factory=dict,
        description="Static mapping of user identifiers to email addresses",
    )

    @model_validator(mode="after")
    def _validate_sendgrid_pair(self) -> "Settings":
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        return self

    @property
    def email_configured(self) -> bool:
        return bool(self.sendgrid_api_key and self.sendgrid_sender)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
