"""Use cases for aggregating a user's financial activity timeline."""

from __future__ import annotations

import functools
import logging
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Sequence

import anyio

from finpipe.domain.entities import (
    ActivityFeed,
    ActivityItem,
    ActivityStats,
    ActivityType,
    RecordKind,
)
from finpipe.domain.errors import SourceUnavailable
from finpipe.domain.ports import RecordStore
from finpipe.utils import gather_settled, now_in_app_timezone, parse_timestamp, to_decimal

logger = logging.getLogger(__name__)

AGGREGATION_ERROR_MESSAGE = (
    "Unable to load your activity history. Please try refreshing the page."
)

# Extra timeline facts derived from one investment row, keyed by status.
# Every investment row yields its "investment" item; the rules add to that.
INVESTMENT_EMISSION_RULES: dict[str, tuple[ActivityType, ...]] = {
    "completed": (ActivityType.RETURN,),
}

TRANSACTION_TYPE_MAP: dict[str, tuple[ActivityType, str]] = {
    "investment": (ActivityType.INVESTMENT, "Investment Transaction"),
    "withdrawal": (ActivityType.WITHDRAWAL, "Withdrawal Processed"),
    "return": (ActivityType.RETURN, "Investment Return"),
    "dividend": (ActivityType.DIVIDEND, "Dividend Payment"),
    "deposit": (ActivityType.DEPOSIT, "Deposit Received"),
}
DEFAULT_TRANSACTION_TYPE = TRANSACTION_TYPE_MAP["deposit"]


def _optional_decimal(value: Any):
    return None if value is None else to_decimal(value)


def _optional_timestamp(value: Any) -> datetime | None:
    return None if value in (None, "") else parse_timestamp(value)


def transform_investment(row: Mapping[str, Any]) -> list[ActivityItem]:
    """Return one ``investment`` item plus any items from the emission rules."""

    name = row["investment_name"]
    status = str(row["status"])
    created_at = parse_timestamp(row["created_at"])
    maturity_date = _optional_timestamp(row.get("maturity_date"))
    expected_return = _optional_decimal(row.get("expected_return_amount"))

    items = [
        ActivityItem(
            id=f"investment-{row['id']}",
            type=ActivityType.INVESTMENT,
            title="Investment Created",
            description=f"Started investment in {name}",
            amount=to_decimal(row["amount_invested"]),
            status=status,
            date=created_at,
            investment_name=name,
            expected_return=expected_return,
            maturity_date=maturity_date,
        )
    ]
    for extra_type in INVESTMENT_EMISSION_RULES.get(status, ()):
        if extra_type is ActivityType.RETURN:
            items.append(
                ActivityItem(
                    id=f"return-{row['id']}",
                    type=ActivityType.RETURN,
                    title="Investment Matured",
                    description=f"Received returns from {name}",
                    amount=expected_return if expected_return is not None else to_decimal(0),
                    status="completed",
                    date=maturity_date or created_at,
                    investment_name=name,
                )
            )
    return items


def transform_pending_investment(row: Mapping[str, Any]) -> list[ActivityItem]:
    return [
        ActivityItem(
            id=f"pending-{row['id']}",
            type=ActivityType.INVESTMENT,
            title="Investment Submitted",
            description=f"Submitted {row['plan_name']} investment for approval",
            amount=to_decimal(row["amount_usd"]),
            status=str(row["status"]),
            date=parse_timestamp(row["created_at"]),
            investment_name=row["plan_name"],
            expected_return=_optional_decimal(row.get("expected_return")),
            maturity_date=_optional_timestamp(row.get("maturity_date")),
            payment_method=row.get("payment_method"),
        )
    ]


def transform_transaction(row: Mapping[str, Any]) -> list[ActivityItem]:
    activity_type, title = TRANSACTION_TYPE_MAP.get(
        str(row.get("transaction_type") or "").lower(), DEFAULT_TRANSACTION_TYPE
    )
    return [
        ActivityItem(
            id=f"transaction-{row['id']}",
            type=activity_type,
            title=title,
            description=row.get("description") or "",
            amount=to_decimal(row["amount"]),
            status=str(row["status"]),
            date=parse_timestamp(row["transaction_date"]),
        )
    ]


def transform_withdrawal(row: Mapping[str, Any]) -> list[ActivityItem]:
    payment_method = str(row["payment_method"])
    return [
        ActivityItem(
            id=f"withdrawal-{row['id']}",
            type=ActivityType.WITHDRAWAL,
            title="Withdrawal Request",
            description=f"Withdrawal request via {payment_method.upper()}",
            amount=to_decimal(row["amount"]),
            status=str(row["status"]),
            date=parse_timestamp(row["created_at"]),
            payment_method=payment_method,
        )
    ]


Transform = Callable[[Mapping[str, Any]], list[ActivityItem]]

# Fetch order doubles as the tie-break order of the merged timeline.
SOURCE_ADAPTERS: tuple[tuple[RecordKind, Transform], ...] = (
    (RecordKind.INVESTMENTS, transform_investment),
    (RecordKind.PENDING_INVESTMENTS, transform_pending_investment),
    (RecordKind.TRANSACTIONS, transform_transaction),
    (RecordKind.WITHDRAWAL_REQUESTS, transform_withdrawal),
)


def merge_activity(batches: Iterable[Sequence[ActivityItem]]) -> list[ActivityItem]:
    """Concatenate ``batches`` and sort newest first.

    The sort is stable, so items sharing a date keep their source order.
    """

    merged: list[ActivityItem] = [item for batch in batches for item in batch]
    merged.sort(key=lambda item: item.date, reverse=True)
    return merged


def compute_stats(items: Sequence[ActivityItem], now: datetime) -> ActivityStats:
    """Derive rollup counters from the merged ``items``."""

    def in_current_month(item: ActivityItem) -> bool:
        localized = item.date.astimezone(now.tzinfo) if now.tzinfo else item.date
        return localized.year == now.year and localized.month == now.month

    return ActivityStats(
        total_activities=len(items),
        active_investments=sum(
            1
            for item in items
            if item.type is ActivityType.INVESTMENT and item.status == "active"
        ),
        pending_requests=sum(1 for item in items if item.status == "pending"),
        this_month=sum(1 for item in items if in_current_month(item)),
    )


class ActivityAggregator:
    """Fan out to every activity source and merge what comes back."""

    def __init__(
        self,
        store: RecordStore,
        *,
        limit: int | None = None,
        clock: Callable[[], datetime] = now_in_app_timezone,
        adapters: Sequence[tuple[RecordKind, Transform]] = SOURCE_ADAPTERS,
    ) -> None:
        self._store = store
        self._limit = limit
        self._clock = clock
        self._adapters = tuple(adapters)

    async def aggregate(self, owner_id: str) -> ActivityFeed:
        """Return ``owner_id``'s merged timeline and its stats.

        A failing source is logged and left out. Only when every source
        fails does the feed carry an error message.
        """

        results = await gather_settled(
            *(self._load_source(kind, transform, owner_id) for kind, transform in self._adapters)
        )

        batches: list[list[ActivityItem]] = []
        failed: list[RecordKind] = []
        for (kind, _), result in zip(self._adapters, results):
            if result.ok:
                batches.append(result.value or [])
                logger.debug("Loaded %s activity items from %s", len(result.value or []), kind.value)
            else:
                failed.append(kind)
                logger.warning(
                    "Activity source %s unavailable for owner %s: %s",
                    kind.value,
                    owner_id,
                    result.error,
                )

        items = merge_activity(batches)
        error = None
        if self._adapters and len(failed) == len(self._adapters):
            logger.error("Every activity source failed for owner %s", owner_id)
            error = AGGREGATION_ERROR_MESSAGE

        return ActivityFeed(
            items=items,
            stats=compute_stats(items, self._clock()),
            error=error,
            failed_sources=failed,
        )

    async def _load_source(
        self, kind: RecordKind, transform: Transform, owner_id: str
    ) -> list[ActivityItem]:
        try:
            rows = await anyio.to_thread.run_sync(
                functools.partial(
                    self._store.fetch_by_owner, kind, owner_id, limit=self._limit
                )
            )
            items: list[ActivityItem] = []
            for row in rows or []:
                items.extend(transform(row))
            return items
        except Exception as exc:
            raise SourceUnavailable(kind, str(exc) or exc.__class__.__name__) from exc


__all__ = [
    "AGGREGATION_ERROR_MESSAGE",
    "ActivityAggregator",
    "INVESTMENT_EMISSION_RULES",
    "SOURCE_ADAPTERS",
    "TRANSACTION_TYPE_MAP",
    "compute_stats",
    "merge_activity",
    "transform_investment",
    "transform_pending_investment",
    "transform_transaction",
    "transform_withdrawal",
]
