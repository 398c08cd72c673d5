"""Coordinate notifications for investment and withdrawal state changes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Mapping

from finpipe.domain.entities import (
    DeliveryOutcome,
    InvestmentRequestData,
    LifecycleEvent,
    MaturedInvestment,
    MaturityBatchEvent,
    NotificationAction,
    Recipient,
    RequestKind,
    UserRef,
    WithdrawalRequestData,
)
from finpipe.domain.errors import ValidationError

from .dispatcher import NotificationDispatcher
from .validators import (
    parse_admin_action,
    parse_kind,
    parse_matured_investment,
    parse_request,
    parse_user,
)

logger = logging.getLogger(__name__)

DEFAULT_MATURITY_SUMMARY = "Processing completed successfully."
MATURITY_FAILURE_MESSAGE = "Failed to process maturity notifications"
INVALID_TRANSITION_ACTION_MESSAGE = "Invalid action: must be one of " + ", ".join(
    action.value for action in NotificationAction
)

_REQUEST_TYPES = {
    RequestKind.INVESTMENT: InvestmentRequestData,
    RequestKind.WITHDRAWAL: WithdrawalRequestData,
}


class TransitionStatus(str, Enum):
    OK = "ok"
    VALIDATION_ERROR = "validation_error"
    DELIVERY_FAILED = "delivery_failed"
    CRITICAL_ERROR = "critical_error"


@dataclass(frozen=True)
class TransitionResult:
    """What a caller needs to answer the triggering request."""

    success: bool
    message: str
    status: TransitionStatus
    outcomes: list[DeliveryOutcome] = field(default_factory=list)
    emails_sent: int = 0
    emails_failed: int = 0


def _flag(value: bool) -> str:
    return "true" if value else "false"


def _failure_message(kind: RequestKind, action: NotificationAction) -> str:
    if action is NotificationAction.REQUEST:
        return f"Failed to send notifications, but {kind.value} request was still created successfully"
    return (
        f"Failed to send {kind.value} {action.value} notification, "
        "but admin action was still processed"
    )


def _critical_message(kind: RequestKind, action: NotificationAction) -> str:
    if action is NotificationAction.REQUEST:
        return _failure_message(kind, action)
    return "Failed to send notification, but admin action was still processed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LifecycleCoordinator:
    """Validate a transition, dispatch its e-mails and report the outcome.

    The coordinator only reacts to transitions that already happened; a
    failed notification never turns into a failed business action.
    """

    def __init__(
        self,
        dispatcher: NotificationDispatcher,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._dispatcher = dispatcher
        self._clock = clock

    async def notify_transition(
        self,
        action: NotificationAction | str,
        kind: RequestKind | str,
        user: UserRef | Mapping[str, Any],
        request: InvestmentRequestData | WithdrawalRequestData | Mapping[str, Any],
        extras: Mapping[str, Any] | None = None,
    ) -> TransitionResult:
        """Notify everyone concerned by one state change.

        ``request`` expands into the user confirmation plus the admin
        alert; ``approve`` and ``reject`` notify the user only. Success
        means at least one message went out.
        """

        try:
            event_action = NotificationAction(action)
        except ValueError:
            return self._invalid(INVALID_TRANSITION_ACTION_MESSAGE)
        try:
            event_kind = parse_kind(kind)
            events = self._build_events(event_action, event_kind, user, request, extras or {})
        except ValidationError as exc:
            return self._invalid(str(exc))

        try:
            outcomes = [
                outcome
                for batch in await self._dispatcher.dispatch_all(events)
                for outcome in batch
            ]
        except Exception:
            logger.exception(
                "Unexpected error sending %s %s notifications", event_kind.value, event_action.value
            )
            return TransitionResult(
                success=False,
                message=_critical_message(event_kind, event_action),
                status=TransitionStatus.CRITICAL_ERROR,
            )

        summary = self._dispatcher.summarize(outcomes)
        logger.info(
            "%s %s notification results: user=%s admin=%s",
            event_kind.value,
            event_action.value,
            summary.user_email_sent,
            summary.admin_email_sent,
        )

        if not summary.any_sent:
            return TransitionResult(
                success=False,
                message=_failure_message(event_kind, event_action),
                status=TransitionStatus.DELIVERY_FAILED,
                outcomes=outcomes,
                emails_sent=summary.sent,
                emails_failed=summary.failed,
            )

        if event_action is NotificationAction.REQUEST:
            message = (
                f"{event_kind.value.capitalize()} notifications sent "
                f"(user: {_flag(summary.user_email_sent)}, admin: {_flag(summary.admin_email_sent)})"
            )
        else:
            message = f"{event_kind.value} {event_action.value} notification sent successfully"
        return TransitionResult(
            success=True,
            message=message,
            status=TransitionStatus.OK,
            outcomes=outcomes,
            emails_sent=summary.sent,
            emails_failed=summary.failed,
        )

    async def notify_investment_submitted(self, payload: Any) -> TransitionResult:
        return await self._notify_submitted(RequestKind.INVESTMENT, payload)

    async def notify_withdrawal_submitted(self, payload: Any) -> TransitionResult:
        return await self._notify_submitted(RequestKind.WITHDRAWAL, payload)

    async def notify_admin_action(self, payload: Any) -> TransitionResult:
        """Handle an ``{user, action, type, request, reason?, transactionHash?}`` payload."""

        body = payload if isinstance(payload, Mapping) else {}
        if not all(body.get(key) for key in ("user", "action", "type", "request")):
            return self._invalid(
                "Missing required fields: user, action, type, and request are required"
            )
        try:
            parse_user(body["user"])
            action = parse_admin_action(body["action"])
            kind = parse_kind(body["type"])
        except ValidationError as exc:
            return self._invalid(str(exc))

        extras = {
            "reason": body.get("reason"),
            "transaction_hash": body.get("transactionHash") or body.get("transaction_hash"),
        }
        return await self.notify_transition(action, kind, body["user"], body["request"], extras)

    async def notify_maturity_batch(self, payload: Any) -> TransitionResult:
        """Send one notice per matured investment plus the admin summary.

        Entries that cannot be parsed count as failed deliveries, so the
        sent and failed counts always add up to the number of entries plus
        one for the summary. The result is successful unless the payload
        itself is malformed.
        """

        body = payload if isinstance(payload, Mapping) else {}
        entries = body.get("maturedInvestments", body.get("matured_investments"))
        if not isinstance(entries, list):
            return self._invalid("maturedInvestments must be an array")
        summary_text = str(body.get("summary") or DEFAULT_MATURITY_SUMMARY)

        rejected: list[DeliveryOutcome] = []
        matured: list[MaturedInvestment] = []
        for index, entry in enumerate(entries):
            try:
                matured.append(parse_matured_investment(entry))
            except ValidationError as exc:
                logger.error("Skipping matured investment #%s: %s", index, exc)
                address = entry.get("user_email") if isinstance(entry, Mapping) else None
                rejected.append(
                    DeliveryOutcome(
                        recipient=Recipient.USER,
                        address=str(address) if address else None,
                        attempted=False,
                        succeeded=False,
                        error=str(exc),
                    )
                )

        try:
            dispatched = await self._dispatcher.dispatch(
                MaturityBatchEvent(matured=tuple(matured), summary=summary_text)
            )
        except Exception:
            logger.exception("Unexpected error sending maturity notifications")
            return TransitionResult(
                success=False,
                message=MATURITY_FAILURE_MESSAGE,
                status=TransitionStatus.CRITICAL_ERROR,
                outcomes=rejected,
                emails_failed=len(entries) + 1,
            )

        summary = self._dispatcher.summarize([*rejected, *dispatched])
        logger.info(
            "Maturity notifications for %s investments: sent=%s failed=%s",
            len(entries),
            summary.sent,
            summary.failed,
        )
        return TransitionResult(
            success=True,
            message=(
                "Maturity processing notifications completed. "
                f"Sent: {summary.sent}, Failed: {summary.failed}"
            ),
            status=TransitionStatus.OK,
            outcomes=summary.outcomes,
            emails_sent=summary.sent,
            emails_failed=summary.failed,
        )

    async def _notify_submitted(self, kind: RequestKind, payload: Any) -> TransitionResult:
        body = payload if isinstance(payload, Mapping) else {}
        if not body.get("user") or not body.get("request"):
            return self._invalid("Missing required fields: user and request are required")
        return await self.notify_transition(
            NotificationAction.REQUEST, kind, body["user"], body["request"]
        )

    def _build_events(
        self,
        action: NotificationAction,
        kind: RequestKind,
        user: UserRef | Mapping[str, Any],
        request: Any,
        extras: Mapping[str, Any],
    ) -> list[LifecycleEvent]:
        user_ref = user if isinstance(user, UserRef) else parse_user(user)
        if isinstance(request, (InvestmentRequestData, WithdrawalRequestData)):
            if not isinstance(request, _REQUEST_TYPES[kind]):
                raise ValidationError(f"Invalid request data for {kind.value}")
            request_data = request
        else:
            request_data = parse_request(kind, request, now=self._clock)

        reason = str(extras.get("reason") or "").strip() or None
        transaction_hash = str(extras.get("transaction_hash") or "").strip() or None

        actions = (
            (NotificationAction.REQUEST, NotificationAction.ADMIN_ALERT)
            if action is NotificationAction.REQUEST
            else (action,)
        )
        return [
            LifecycleEvent(
                kind=kind,
                action=item,
                user=user_ref,
                request=request_data,
                reason=reason,
                transaction_hash=transaction_hash,
            )
            for item in actions
        ]

    @staticmethod
    def _invalid(message: str) -> TransitionResult:
        logger.warning("Rejected notification request: %s", message)
        return TransitionResult(
            success=False, message=message, status=TransitionStatus.VALIDATION_ERROR
        )


__all__ = [
    "DEFAULT_MATURITY_SUMMARY",
    "INVALID_TRANSITION_ACTION_MESSAGE",
    "LifecycleCoordinator",
    "MATURITY_FAILURE_MESSAGE",
    "TransitionResult",
    "TransitionStatus",
]
