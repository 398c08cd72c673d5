"""Shared fixtures: in-memory database settings plus fake collaborators."""

from __future__ import annotations

import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_TIMEZONE"] = "UTC"
os.environ.pop("SENDGRID_API_KEY", None)

from finpipe.config import NotificationConfig  # noqa: E402
from finpipe.domain.entities import DeliveryErrorCode, RecordKind  # noqa: E402
from finpipe.domain.errors import DeliveryFailure  # noqa: E402

ADMIN_EMAIL = "admin@example.com"
FIXED_NOW = datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc)


class FakeRecordStore:
    """Serve canned rows per kind; kinds listed in ``failing`` raise."""

    def __init__(self) -> None:
        self.rows: dict[RecordKind, list[dict]] = {}
        self.matured: list[dict] = []
        self.failing: set[RecordKind] = set()
        self.calls: list[tuple[RecordKind, str, int | None]] = []

    def fetch_by_owner(self, kind, owner_id, *, limit=None):
        self.calls.append((kind, owner_id, limit))
        if kind in self.failing:
            raise ConnectionError(f"{kind.value} offline")
        return list(self.rows.get(kind, []))

    def list_matured_investments(self, *, since):
        self.since = since
        return list(self.matured)


class RecordingChannel:
    """Remember every message; addresses listed in ``failing`` raise."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, object]] = []
        self.failing: set[str] = set()

    async def send(self, to, message):
        if to in self.failing:
            raise DeliveryFailure(
                "SendGrid API responded with status 503",
                code=DeliveryErrorCode.PROVIDER_UNAVAILABLE,
                status_code=503,
            )
        self.sent.append((to, message))

    @property
    def recipients(self) -> list[str]:
        return [to for to, _ in self.sent]


@pytest.fixture()
def store() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture()
def channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture()
def notification_config() -> NotificationConfig:
    return NotificationConfig(
        sender_email="noreply@example.com",
        sender_name="Everest Global Holdings",
        admin_email=ADMIN_EMAIL,
    )


@pytest.fixture()
def fixed_now() -> datetime:
    return FIXED_NOW
