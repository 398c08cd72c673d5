"""Fan-out delivery of notification events to their recipients."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, Sequence

from finpipe.config import NotificationConfig
from finpipe.domain.entities import (
    DeliveryErrorCode,
    DeliveryOutcome,
    DispatchSummary,
    LifecycleEvent,
    MaturityBatchEvent,
    MaturityNoticeEvent,
    NotificationAction,
    NotificationEvent,
    Recipient,
    RenderedMessage,
)
from finpipe.domain.errors import DeliveryFailure
from finpipe.domain.ports import DeliveryChannel
from finpipe.utils import TaskResult, gather_settled

from .templates import render

logger = logging.getLogger(__name__)

MISSING_ADDRESS_ERROR = "Recipient e-mail address is missing"

Renderer = Callable[..., RenderedMessage]


@dataclass(frozen=True)
class PlannedDelivery:
    """One message to one recipient, decided before anything is sent."""

    recipient: Recipient
    address: str | None
    event: NotificationEvent

    @property
    def deliverable(self) -> bool:
        return bool(self.address and self.address.strip())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NotificationDispatcher:
    """Deliver each event to its recipients concurrently.

    Every planned recipient produces exactly one :class:`DeliveryOutcome`;
    failures are reported in the outcomes and never raised. There is a
    single delivery attempt per recipient.
    """

    def __init__(
        self,
        channel: DeliveryChannel,
        config: NotificationConfig,
        *,
        clock: Callable[[], datetime] = _utcnow,
        renderer: Renderer = render,
    ) -> None:
        self._channel = channel
        self._config = config
        self._clock = clock
        self._render = renderer

    def plan(self, event: NotificationEvent) -> list[PlannedDelivery]:
        """Return the recipient set for ``event``."""

        if isinstance(event, LifecycleEvent):
            if event.action is NotificationAction.ADMIN_ALERT:
                return [PlannedDelivery(Recipient.ADMIN, self._config.admin_email, event)]
            return [PlannedDelivery(Recipient.USER, event.user.email, event)]

        if isinstance(event, MaturityNoticeEvent):
            return [PlannedDelivery(Recipient.USER, event.investment.user_email, event)]

        if isinstance(event, MaturityBatchEvent):
            deliveries = [
                PlannedDelivery(Recipient.USER, investment.user_email, MaturityNoticeEvent(investment))
                for investment in event.matured
            ]
            deliveries.append(PlannedDelivery(Recipient.ADMIN, self._config.admin_email, event))
            return deliveries

        raise TypeError(f"Unsupported notification event: {type(event).__name__}")

    async def dispatch(self, event: NotificationEvent) -> list[DeliveryOutcome]:
        """Deliver ``event`` and return one outcome per recipient."""

        return await self._run(self.plan(event))

    async def dispatch_all(
        self, events: Iterable[NotificationEvent]
    ) -> list[list[DeliveryOutcome]]:
        """Deliver several events in one fan-out.

        The result holds one outcome list per event, in input order.
        """

        plans = [self.plan(event) for event in events]
        flat = await self._run([delivery for plan in plans for delivery in plan])

        grouped: list[list[DeliveryOutcome]] = []
        offset = 0
        for plan in plans:
            grouped.append(flat[offset : offset + len(plan)])
            offset += len(plan)
        return grouped

    @staticmethod
    def summarize(outcomes: Sequence[DeliveryOutcome]) -> DispatchSummary:
        sent = sum(1 for outcome in outcomes if outcome.succeeded)
        return DispatchSummary(
            user_email_sent=any(
                outcome.succeeded for outcome in outcomes if outcome.recipient is Recipient.USER
            ),
            admin_email_sent=any(
                outcome.succeeded for outcome in outcomes if outcome.recipient is Recipient.ADMIN
            ),
            sent=sent,
            failed=len(outcomes) - sent,
            outcomes=list(outcomes),
        )

    async def _run(self, deliveries: Sequence[PlannedDelivery]) -> list[DeliveryOutcome]:
        generated_at = self._clock()
        results = await gather_settled(
            *(self._deliver(delivery, generated_at) for delivery in deliveries)
        )
        return [
            self._outcome_from_result(delivery, result)
            for delivery, result in zip(deliveries, results)
        ]

    def _outcome_from_result(
        self, delivery: PlannedDelivery, result: TaskResult
    ) -> DeliveryOutcome:
        if result.ok and isinstance(result.value, DeliveryOutcome):
            return result.value
        logger.error(
            "Unexpected error delivering to %s: %s", delivery.recipient.value, result.error
        )
        return DeliveryOutcome(
            recipient=delivery.recipient,
            address=delivery.address,
            attempted=True,
            succeeded=False,
            error=str(result.error) or "Unexpected delivery error",
            error_code=DeliveryErrorCode.UNKNOWN,
        )

    async def _deliver(self, delivery: PlannedDelivery, generated_at: datetime) -> DeliveryOutcome:
        recipient = delivery.recipient
        if not delivery.deliverable:
            logger.error("Skipping %s notification: %s", recipient.value, MISSING_ADDRESS_ERROR)
            return DeliveryOutcome(
                recipient=recipient,
                address=delivery.address,
                attempted=False,
                succeeded=False,
                error=MISSING_ADDRESS_ERROR,
            )

        try:
            message = self._render(delivery.event, generated_at=generated_at)
        except Exception as exc:
            logger.exception("Failed to render %s notification", recipient.value)
            return DeliveryOutcome(
                recipient=recipient,
                address=delivery.address,
                attempted=False,
                succeeded=False,
                error=f"Rendering failed: {exc}",
            )

        try:
            await self._channel.send(delivery.address, message)
        except DeliveryFailure as exc:
            logger.error(
                "Failed to deliver %s notification (%s): %s",
                recipient.value,
                exc.code.value,
                exc.detail,
            )
            return DeliveryOutcome(
                recipient=recipient,
                address=delivery.address,
                attempted=True,
                succeeded=False,
                error=exc.detail,
                error_code=exc.code,
            )
        except Exception as exc:
            logger.exception("Delivery channel raised for %s notification", recipient.value)
            return DeliveryOutcome(
                recipient=recipient,
                address=delivery.address,
                attempted=True,
                succeeded=False,
                error=str(exc) or exc.__class__.__name__,
                error_code=DeliveryErrorCode.UNKNOWN,
            )

        logger.debug("Delivered %s notification: %s", recipient.value, message.subject)
        return DeliveryOutcome(
            recipient=recipient, address=delivery.address, attempted=True, succeeded=True
        )


__all__ = ["MISSING_ADDRESS_ERROR", "NotificationDispatcher", "PlannedDelivery"]
