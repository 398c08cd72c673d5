"""Application configuration settings."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"

DEFAULT_SENDER = "noreply@everestglobal.com"
DEFAULT_SENDER_NAME = "Everest Global Holdings"
DEFAULT_ADMIN_EMAIL = "admin@everestglobal.com"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./finpipe.db",
        description="Database connection URL used by SQLAlchemy to reach the record store",
        min_length=1,
    )
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key; when missing, e-mails are only logged",
    )
    sendgrid_sender: str = Field(
        default=DEFAULT_SENDER,
        description="Email address that will appear as the sender of transactional messages",
        min_length=3,
    )
    sender_name: str = Field(
        default=DEFAULT_SENDER_NAME,
        description="Display name attached to the sender address",
    )
    admin_email: str = Field(
        default=DEFAULT_ADMIN_EMAIL,
        description="Mailbox receiving administrator alerts and maturity summaries",
        min_length=3,
    )
    notifications_dev_mode: bool = Field(
        default=False,
        description="Log would-be e-mails instead of delivering them",
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used to decide which activities happened this month",
    )
    log_level: str = Field(default="INFO", description="Root log level")
    activity_fetch_limit: int | None = Field(
        default=None,
        description="Optional cap on rows fetched per activity source",
        gt=0,
    )

    @model_validator(mode="after")
    def _validate_addresses(self) -> "Settings":
        if "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        if "@" not in self.admin_email:
            raise ValueError("ADMIN_EMAIL must be a valid email address")
        return self


@dataclass(frozen=True)
class NotificationConfig:
    """Delivery settings resolved once and handed to the notification layer."""

    sender_email: str
    sender_name: str
    admin_email: str
    api_key: str | None = None
    dev_mode: bool = False

    @property
    def delivery_enabled(self) -> bool:
        """Return ``True`` when messages should reach the real provider."""

        return bool(self.api_key) and not self.dev_mode

    @classmethod
    def from_settings(cls, settings: Settings) -> "NotificationConfig":
        return cls(
            sender_email=settings.sendgrid_sender,
            sender_name=settings.sender_name,
            admin_email=settings.admin_email,
            api_key=settings.sendgrid_api_key or None,
            dev_mode=settings.notifications_dev_mode,
        )


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = [
    "NotificationConfig",
    "Settings",
    "get_settings",
    "reset_settings_cache",
]
