"""Domain entities describing the investor activity timeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum


class ActivityType(str, Enum):
    INVESTMENT = "investment"
    RETURN = "return"
    WITHDRAWAL = "withdrawal"
    DEPOSIT = "deposit"
    DIVIDEND = "dividend"


class RecordKind(str, Enum):
    """Record collections the activity timeline is assembled from."""

    INVESTMENTS = "investments"
    PENDING_INVESTMENTS = "pending_investments"
    TRANSACTIONS = "transactions"
    WITHDRAWAL_REQUESTS = "withdrawal_requests"


@dataclass(frozen=True)
class ActivityItem:
    """One normalized entry of a user's financial timeline.

    ``id`` is namespaced by the source kind (``investment-42``,
    ``transaction-42``) so it stays unique across sources even when their
    primary keys collide.
    """

    id: str
    type: ActivityType
    title: str
    description: str
    amount: Decimal
    status: str
    date: datetime
    investment_name: str | None = None
    expected_return: Decimal | None = None
    maturity_date: datetime | None = None
    payment_method: str | None = None


@dataclass(frozen=True)
class ActivityStats:
    """Rollup counters derived from a set of :class:`ActivityItem`."""

    total_activities: int = 0
    active_investments: int = 0
    pending_requests: int = 0
    this_month: int = 0


@dataclass
class ActivityFeed:
    """Merged timeline returned by one aggregation call."""

    items: list[ActivityItem] = field(default_factory=list)
    stats: ActivityStats = field(default_factory=ActivityStats)
    error: str | None = None
    failed_sources: list[RecordKind] = field(default_factory=list)


__all__ = [
    "ActivityFeed",
    "ActivityItem",
    "ActivityStats",
    "ActivityType",
    "RecordKind",
]
