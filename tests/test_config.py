"""Tests for settings loading and the derived notification config."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from finpipe.config import NotificationConfig, Settings, get_settings, reset_settings_cache


def test_defaults() -> None:
    settings = Settings(_env_file=None)

    assert settings.sendgrid_sender == "noreply@everestglobal.com"
    assert settings.admin_email == "admin@everestglobal.com"
    assert settings.notifications_dev_mode is False


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ADMIN_EMAIL", "ops@example.com")
    monkeypatch.setenv("NOTIFICATIONS_DEV_MODE", "true")
    reset_settings_cache()
    try:
        settings = get_settings()
        assert settings.admin_email == "ops@example.com"
        assert settings.notifications_dev_mode is True
    finally:
        monkeypatch.undo()
        reset_settings_cache()


def test_invalid_addresses_are_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, admin_email="not-an-address")


@pytest.mark.parametrize(
    ("api_key", "dev_mode", "enabled"),
    [("SG.key", False, True), ("SG.key", True, False), (None, False, False), ("", False, False)],
)
def test_delivery_enabled(api_key, dev_mode, enabled) -> None:
    config = NotificationConfig.from_settings(
        Settings(_env_file=None, sendgrid_api_key=api_key, notifications_dev_mode=dev_mode)
    )

    assert config.delivery_enabled is enabled
