"""Tests for the scheduled maturity processing use case."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

import anyio

from finpipe.application.use_cases.maturity import (
    build_maturity_summary,
    process_matured_investments,
)
from finpipe.application.use_cases.notifications import (
    LifecycleCoordinator,
    NotificationDispatcher,
)

ADMIN = "admin@example.com"


def test_build_maturity_summary() -> None:
    assert build_maturity_summary(2, date(2025, 3, 1)) == (
        "Automated processing completed. 2 investments matured on 2025-03-01."
    )


def test_process_matured_investments(store, channel, notification_config, fixed_now) -> None:
    store.matured = [
        {
            "investment_id": "1",
            "user_id": "u1",
            "user_email": "ada@example.com",
            "user_name": "Ada",
            "investment_name": "Gold Plan",
            "amount_invested": Decimal("1000.00"),
            "final_amount": Decimal("1200.00"),
            "maturity_date": datetime(2025, 3, 1, tzinfo=timezone.utc),
        }
    ]
    coordinator = LifecycleCoordinator(
        NotificationDispatcher(channel, notification_config, clock=lambda: fixed_now)
    )
    since = datetime(2025, 2, 28, tzinfo=timezone.utc)

    result = anyio.run(
        lambda: process_matured_investments(
            store, coordinator, since=since, processed_on=date(2025, 3, 1)
        )
    )

    assert store.since == since
    assert result.success is True
    assert (result.emails_sent, result.emails_failed) == (2, 0)
    messages = dict(channel.sent)
    assert "Dear Ada," in messages["ada@example.com"].text
    assert "1 investments matured on 2025-03-01." in messages[ADMIN].text
