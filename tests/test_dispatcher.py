"""Tests for the notification dispatcher fan-out."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import anyio
import pytest

from finpipe.application.use_cases.notifications import NotificationDispatcher
from finpipe.application.use_cases.notifications.dispatcher import MISSING_ADDRESS_ERROR
from finpipe.domain.entities import (
    DeliveryErrorCode,
    InvestmentRequestData,
    LifecycleEvent,
    MaturedInvestment,
    MaturityBatchEvent,
    NotificationAction,
    Recipient,
    RequestKind,
    UserRef,
)

ADMIN = "admin@example.com"
USER = UserRef(id="u1", email="a@b.com")
REQUEST = InvestmentRequestData(
    id="inv-1",
    plan_name="Gold Plan",
    amount_usd=Decimal("5000"),
    expected_return=Decimal("6000"),
    duration_days=30,
    interest_rate=Decimal("1.5"),
    payment_method="btc",
    maturity_date=datetime(2025, 3, 1, tzinfo=timezone.utc),
    created_at=datetime(2025, 1, 30, tzinfo=timezone.utc),
)


def _lifecycle(action: NotificationAction) -> LifecycleEvent:
    return LifecycleEvent(kind=RequestKind.INVESTMENT, action=action, user=USER, request=REQUEST)


def _matured(email: str) -> MaturedInvestment:
    return MaturedInvestment(
        investment_id="m",
        user_id="u",
        user_email=email,
        investment_name="Gold Plan",
        amount_invested=Decimal("1000"),
        final_amount=Decimal("1200"),
        maturity_date=datetime(2025, 3, 1, tzinfo=timezone.utc),
    )


@pytest.fixture()
def dispatcher(channel, notification_config, fixed_now) -> NotificationDispatcher:
    return NotificationDispatcher(channel, notification_config, clock=lambda: fixed_now)


@pytest.mark.parametrize(
    ("action", "recipient", "address"),
    [
        (NotificationAction.REQUEST, Recipient.USER, "a@b.com"),
        (NotificationAction.ADMIN_ALERT, Recipient.ADMIN, ADMIN),
        (NotificationAction.APPROVE, Recipient.USER, "a@b.com"),
        (NotificationAction.REJECT, Recipient.USER, "a@b.com"),
    ],
)
def test_lifecycle_recipients(dispatcher, channel, action, recipient, address) -> None:
    outcomes = anyio.run(dispatcher.dispatch, _lifecycle(action))

    assert [(outcome.recipient, outcome.address) for outcome in outcomes] == [(recipient, address)]
    assert outcomes[0].succeeded
    assert channel.recipients == [address]


def test_maturity_batch_targets_every_user_and_the_admin(dispatcher, channel) -> None:
    event = MaturityBatchEvent(
        matured=(_matured("one@example.com"), _matured("two@example.com")), summary="done"
    )

    outcomes = anyio.run(dispatcher.dispatch, event)

    assert [outcome.recipient for outcome in outcomes] == [
        Recipient.USER,
        Recipient.USER,
        Recipient.ADMIN,
    ]
    assert sorted(channel.recipients) == sorted(["one@example.com", "two@example.com", ADMIN])
    subjects = {to: message.subject for to, message in channel.sent}
    assert subjects["one@example.com"] == "🎉 Investment Matured - Gold Plan"
    assert subjects[ADMIN].startswith("📊 Maturity Processing Summary - 2 investments")


def test_empty_maturity_batch_still_sends_admin_summary(dispatcher, channel) -> None:
    outcomes = anyio.run(dispatcher.dispatch, MaturityBatchEvent())

    assert len(outcomes) == 1
    assert outcomes[0].recipient is Recipient.ADMIN
    assert channel.recipients == [ADMIN]


def test_failed_delivery_is_reported_not_raised(dispatcher, channel) -> None:
    channel.failing.add("two@example.com")
    event = MaturityBatchEvent(matured=(_matured("one@example.com"), _matured("two@example.com")))

    outcomes = anyio.run(dispatcher.dispatch, event)

    failed = [outcome for outcome in outcomes if not outcome.succeeded]
    assert len(outcomes) == 3
    assert len(failed) == 1
    assert failed[0].address == "two@example.com"
    assert failed[0].attempted is True
    assert failed[0].error_code is DeliveryErrorCode.PROVIDER_UNAVAILABLE


def test_missing_address_is_not_attempted(dispatcher, channel) -> None:
    outcomes = anyio.run(dispatcher.dispatch, MaturityBatchEvent(matured=(_matured(""),)))

    user_outcome = outcomes[0]
    assert user_outcome.attempted is False
    assert user_outcome.succeeded is False
    assert user_outcome.error == MISSING_ADDRESS_ERROR
    assert channel.recipients == [ADMIN]


def test_unexpected_channel_errors_become_outcomes(notification_config, fixed_now) -> None:
    class ExplodingChannel:
        async def send(self, to, message):
            raise RuntimeError("socket closed")

    dispatcher = NotificationDispatcher(
        ExplodingChannel(), notification_config, clock=lambda: fixed_now
    )

    outcomes = anyio.run(dispatcher.dispatch, _lifecycle(NotificationAction.APPROVE))

    assert outcomes[0].succeeded is False
    assert outcomes[0].error == "socket closed"
    assert outcomes[0].error_code is DeliveryErrorCode.UNKNOWN


def test_dispatch_all_groups_outcomes_per_event(dispatcher, channel) -> None:
    channel.failing.add(ADMIN)
    events = [_lifecycle(NotificationAction.REQUEST), _lifecycle(NotificationAction.ADMIN_ALERT)]

    grouped = anyio.run(dispatcher.dispatch_all, events)

    assert [len(outcomes) for outcomes in grouped] == [1, 1]
    assert grouped[0][0].succeeded is True
    assert grouped[1][0].succeeded is False


def test_deliveries_run_concurrently(notification_config, fixed_now) -> None:
    class BarrierChannel:
        """Each send waits until every send has started."""

        def __init__(self, expected: int) -> None:
            self.expected = expected
            self.started = 0
            self.event: anyio.Event | None = None

        async def send(self, to, message):
            if self.event is None:
                self.event = anyio.Event()
            self.started += 1
            if self.started == self.expected:
                self.event.set()
            with anyio.fail_after(2):
                await self.event.wait()

    channel = BarrierChannel(expected=3)
    dispatcher = NotificationDispatcher(channel, notification_config, clock=lambda: fixed_now)
    event = MaturityBatchEvent(matured=(_matured("one@example.com"), _matured("two@example.com")))

    outcomes = anyio.run(dispatcher.dispatch, event)

    assert all(outcome.succeeded for outcome in outcomes)


def test_summarize_counts_outcomes(dispatcher, channel) -> None:
    channel.failing.add(ADMIN)
    grouped = anyio.run(
        dispatcher.dispatch_all,
        [_lifecycle(NotificationAction.REQUEST), _lifecycle(NotificationAction.ADMIN_ALERT)],
    )

    summary = NotificationDispatcher.summarize([outcome for batch in grouped for outcome in batch])

    assert summary.user_email_sent is True
    assert summary.admin_email_sent is False
    assert (summary.sent, summary.failed) == (1, 1)
    assert summary.any_sent
