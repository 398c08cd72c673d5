"""Parsing of raw notification payloads into domain objects.

Each parser raises :class:`~finpipe.domain.errors.ValidationError` with a
message suitable for returning to the caller unchanged.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Mapping

from finpipe.domain.entities import (
    InvestmentRequestData,
    MaturedInvestment,
    NotificationAction,
    RequestKind,
    UserRef,
    WithdrawalRequestData,
)
from finpipe.domain.errors import ValidationError
from finpipe.utils import parse_timestamp, to_decimal

ADMIN_ACTIONS = (NotificationAction.APPROVE, NotificationAction.REJECT)

INVALID_USER_MESSAGE = "Invalid user data: email and id are required"
INVALID_INVESTMENT_MESSAGE = "Invalid request data: id, plan_name, and amount_usd are required"
INVALID_WITHDRAWAL_MESSAGE = (
    "Invalid request data: id, amount, payment_method, and wallet_address are required"
)


def _text(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    if value is None or isinstance(value, (dict, list, bool)):
        return ""
    return str(value).strip()


def _optional_text(payload: Mapping[str, Any], key: str) -> str | None:
    return _text(payload, key) or None


def _decimal(value: Any, *, message: str, default: Decimal | None = None) -> Decimal:
    if value in (None, "") and default is not None:
        return default
    try:
        return to_decimal(value)
    except ValueError as exc:
        raise ValidationError(message) from exc


def _optional_decimal(value: Any, *, message: str) -> Decimal | None:
    if value in (None, ""):
        return None
    return _decimal(value, message=message)


def _optional_timestamp(value: Any, *, message: str) -> datetime | None:
    if value in (None, ""):
        return None
    try:
        return parse_timestamp(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(message) from exc


def _timestamp(value: Any, *, message: str, default: Callable[[], datetime]) -> datetime:
    parsed = _optional_timestamp(value, message=message)
    return parsed if parsed is not None else default()


def require_mapping(value: Any, message: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping) or not value:
        raise ValidationError(message)
    return value


def parse_user(payload: Any) -> UserRef:
    user = require_mapping(payload, INVALID_USER_MESSAGE)
    user_id, email = _text(user, "id"), _text(user, "email")
    if not user_id or not email:
        raise ValidationError(INVALID_USER_MESSAGE)
    name = _optional_text(user, "full_name") or _optional_text(user, "name")
    return UserRef(id=user_id, email=email, name=name)


def parse_investment_request(
    payload: Any, *, now: Callable[[], datetime]
) -> InvestmentRequestData:
    """Parse an investment request; only ``id``, ``plan_name`` and ``amount_usd`` are required.

    ``expected_return`` and ``maturity_date`` stay ``None`` when absent.
    """

    request = require_mapping(payload, INVALID_INVESTMENT_MESSAGE)
    request_id, plan_name = _text(request, "id"), _text(request, "plan_name")
    if not request_id or not plan_name:
        raise ValidationError(INVALID_INVESTMENT_MESSAGE)
    amount = _decimal(request.get("amount_usd"), message=INVALID_INVESTMENT_MESSAGE)
    if amount <= 0:
        raise ValidationError(INVALID_INVESTMENT_MESSAGE)

    duration = request.get("duration_days")
    try:
        duration_days = int(duration) if duration not in (None, "") else 0
    except (TypeError, ValueError) as exc:
        raise ValidationError("Invalid request data: duration_days must be a whole number") from exc

    return InvestmentRequestData(
        id=request_id,
        plan_name=plan_name,
        amount_usd=amount,
        expected_return=_optional_decimal(
            request.get("expected_return"),
            message="Invalid request data: expected_return must be a number",
        ),
        duration_days=duration_days,
        interest_rate=_decimal(
            request.get("interest_rate"),
            message="Invalid request data: interest_rate must be a number",
            default=Decimal(0),
        ),
        payment_method=_text(request, "payment_method"),
        maturity_date=_optional_timestamp(
            request.get("maturity_date"),
            message="Invalid request data: maturity_date must be a date",
        ),
        created_at=_timestamp(
            request.get("created_at"),
            message="Invalid request data: created_at must be a date",
            default=now,
        ),
        transaction_hash=_optional_text(request, "transaction_hash"),
    )


def parse_withdrawal_request(
    payload: Any, *, now: Callable[[], datetime]
) -> WithdrawalRequestData:
    request = require_mapping(payload, INVALID_WITHDRAWAL_MESSAGE)
    request_id = _text(request, "id")
    payment_method = _text(request, "payment_method")
    wallet_address = _text(request, "wallet_address")
    if not request_id or not payment_method or not wallet_address:
        raise ValidationError(INVALID_WITHDRAWAL_MESSAGE)
    amount = _decimal(request.get("amount"), message=INVALID_WITHDRAWAL_MESSAGE)
    if amount <= 0:
        raise ValidationError(INVALID_WITHDRAWAL_MESSAGE)
    return WithdrawalRequestData(
        id=request_id,
        amount=amount,
        payment_method=payment_method,
        wallet_address=wallet_address,
        created_at=_timestamp(
            request.get("created_at"),
            message="Invalid request data: created_at must be a date",
            default=now,
        ),
    )


def parse_request(
    kind: RequestKind, payload: Any, *, now: Callable[[], datetime]
) -> InvestmentRequestData | WithdrawalRequestData:
    if kind is RequestKind.INVESTMENT:
        return parse_investment_request(payload, now=now)
    return parse_withdrawal_request(payload, now=now)


def parse_kind(value: Any) -> RequestKind:
    try:
        return RequestKind(value)
    except ValueError as exc:
        raise ValidationError("Invalid type: must be investment or withdrawal") from exc


def parse_admin_action(value: Any) -> NotificationAction:
    try:
        action = NotificationAction(value)
    except ValueError as exc:
        raise ValidationError("Invalid action: must be approve or reject") from exc
    if action not in ADMIN_ACTIONS:
        raise ValidationError("Invalid action: must be approve or reject")
    return action


def parse_matured_investment(payload: Any) -> MaturedInvestment:
    """Parse one entry of a maturity batch."""

    message = (
        "Invalid matured investment: user_email, investment_name, amount_invested, "
        "final_amount and maturity_date are required"
    )
    item = require_mapping(payload, message)
    email, name = _text(item, "user_email"), _text(item, "investment_name")
    if not email or not name or item.get("maturity_date") in (None, ""):
        raise ValidationError(message)
    try:
        maturity_date = parse_timestamp(item["maturity_date"])
    except (TypeError, ValueError) as exc:
        raise ValidationError(message) from exc
    return MaturedInvestment(
        investment_id=_text(item, "investment_id") or _text(item, "id"),
        user_id=_text(item, "user_id"),
        user_email=email,
        investment_name=name,
        amount_invested=_decimal(item.get("amount_invested"), message=message),
        final_amount=_decimal(item.get("final_amount"), message=message),
        maturity_date=maturity_date,
        user_name=_optional_text(item, "user_name"),
    )


__all__ = [
    "ADMIN_ACTIONS",
    "INVALID_INVESTMENT_MESSAGE",
    "INVALID_USER_MESSAGE",
    "INVALID_WITHDRAWAL_MESSAGE",
    "parse_admin_action",
    "parse_investment_request",
    "parse_kind",
    "parse_matured_investment",
    "parse_request",
    "parse_user",
    "parse_withdrawal_request",
    "require_mapping",
]
