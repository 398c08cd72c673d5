"""Domain entities for lifecycle e-mail notifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Union


class RequestKind(str, Enum):
    INVESTMENT = "investment"
    WITHDRAWAL = "withdrawal"


class NotificationAction(str, Enum):
    REQUEST = "request"
    ADMIN_ALERT = "admin_alert"
    APPROVE = "approve"
    REJECT = "reject"


class Recipient(str, Enum):
    USER = "user"
    ADMIN = "admin"


class DeliveryErrorCode(str, Enum):
    """Normalized categories for provider delivery errors."""

    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    BAD_REQUEST = "bad_request"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    RATE_LIMITED = "rate_limited"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    NETWORK = "network"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class UserRef:
    id: str
    email: str
    name: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.email


@dataclass(frozen=True)
class InvestmentRequestData:
    id: str
    plan_name: str
    amount_usd: Decimal
    expected_return: Decimal | None
    duration_days: int
    interest_rate: Decimal
    payment_method: str
    maturity_date: datetime | None
    created_at: datetime
    transaction_hash: str | None = None


@dataclass(frozen=True)
class WithdrawalRequestData:
    id: str
    amount: Decimal
    payment_method: str
    wallet_address: str
    created_at: datetime


@dataclass(frozen=True)
class MaturedInvestment:
    """One investment reaching maturity, with its owner's contact data."""

    investment_id: str
    user_id: str
    user_email: str
    investment_name: str
    amount_invested: Decimal
    final_amount: Decimal
    maturity_date: datetime
    user_name: str | None = None

    @property
    def profit(self) -> Decimal:
        return self.final_amount - self.amount_invested

    @property
    def user(self) -> UserRef:
        return UserRef(id=self.user_id, email=self.user_email, name=self.user_name)


@dataclass(frozen=True)
class LifecycleEvent:
    """State transition of one investment or withdrawal request."""

    kind: RequestKind
    action: NotificationAction
    user: UserRef
    request: InvestmentRequestData | WithdrawalRequestData
    reason: str | None = None
    transaction_hash: str | None = None


@dataclass(frozen=True)
class MaturityNoticeEvent:
    """Per-user notice that an investment matured."""

    investment: MaturedInvestment


@dataclass(frozen=True)
class MaturityBatchEvent:
    """A maturity run: one notice per investment plus an admin roundup."""

    matured: tuple[MaturedInvestment, ...] = ()
    summary: str = ""


NotificationEvent = Union[LifecycleEvent, MaturityNoticeEvent, MaturityBatchEvent]


@dataclass(frozen=True)
class RenderedMessage:
    subject: str
    html: str
    text: str
    reply_to: str | None = None


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result of delivering one message to one recipient."""

    recipient: Recipient
    address: str | None
    attempted: bool
    succeeded: bool
    error: str | None = None
    error_code: DeliveryErrorCode | None = None


@dataclass(frozen=True)
class DispatchSummary:
    user_email_sent: bool
    admin_email_sent: bool
    sent: int
    failed: int
    outcomes: list[DeliveryOutcome] = field(default_factory=list)

    @property
    def any_sent(self) -> bool:
        return self.sent > 0


__all__ = [
    "DeliveryErrorCode",
    "DeliveryOutcome",
    "DispatchSummary",
    "InvestmentRequestData",
    "LifecycleEvent",
    "MaturedInvestment",
    "MaturityBatchEvent",
    "MaturityNoticeEvent",
    "NotificationAction",
    "NotificationEvent",
    "Recipient",
    "RenderedMessage",
    "RequestKind",
    "UserRef",
    "WithdrawalRequestData",
]
