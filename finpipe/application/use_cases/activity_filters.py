"""Filtering and export helpers for the activity timeline."""

from __future__ import annotations

import csv
import io
import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Sequence

from finpipe.domain.entities import ActivityItem, ActivityType

CSV_HEADER = (
    "Date",
    "Type",
    "Description",
    "Amount",
    "Status",
    "Investment Name",
    "Payment Method",
)


class TypeFilter(str, Enum):
    ALL = "all"
    INVESTMENTS = "investments"
    WITHDRAWALS = "withdrawals"
    RETURNS = "returns"


class TimeRange(str, Enum):
    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    LAST_90_DAYS = "90d"
    ALL = "all"


_TIME_RANGE_DAYS = {
    TimeRange.LAST_7_DAYS: 7,
    TimeRange.LAST_30_DAYS: 30,
    TimeRange.LAST_90_DAYS: 90,
}

_TYPES_BY_FILTER = {
    TypeFilter.INVESTMENTS: {ActivityType.INVESTMENT},
    TypeFilter.WITHDRAWALS: {ActivityType.WITHDRAWAL},
    TypeFilter.RETURNS: {ActivityType.RETURN, ActivityType.DIVIDEND},
}


@dataclass(frozen=True)
class ActivityFilters:
    type: TypeFilter = TypeFilter.ALL
    time_range: TimeRange = TimeRange.ALL
    search: str = ""

    @property
    def is_active(self) -> bool:
        return (
            self.type is not TypeFilter.ALL
            or self.time_range is not TimeRange.ALL
            or bool(self.search.strip())
        )


def matches_type(item: ActivityItem, type_filter: TypeFilter) -> bool:
    if type_filter is TypeFilter.ALL:
        return True
    return item.type in _TYPES_BY_FILTER[type_filter]


def in_time_range(item: ActivityItem, time_range: TimeRange, now: datetime) -> bool:
    """Return ``True`` when ``item`` is at most N (rounded up) days old."""

    if time_range is TimeRange.ALL:
        return True
    elapsed_days = math.ceil((now - item.date).total_seconds() / 86400)
    return elapsed_days <= _TIME_RANGE_DAYS[time_range]


def matches_search(item: ActivityItem, query: str) -> bool:
    term = query.strip().lower()
    if not term:
        return True
    haystack = (
        item.title,
        item.description,
        item.investment_name or "",
        item.payment_method or "",
        item.status,
    )
    return any(term in value.lower() for value in haystack)


def filter_activities(
    items: Sequence[ActivityItem], filters: ActivityFilters, *, now: datetime
) -> list[ActivityItem]:
    """Return the subset of ``items`` matching every filter, order preserved."""

    return [
        item
        for item in items
        if matches_type(item, filters.type)
        and in_time_range(item, filters.time_range, now)
        and matches_search(item, filters.search)
    ]


def export_csv(items: Sequence[ActivityItem]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for item in items:
        writer.writerow(
            (
                item.date.date().isoformat(),
                item.type.value,
                item.description,
                str(item.amount),
                item.status,
                item.investment_name or "",
                item.payment_method or "",
            )
        )
    return buffer.getvalue()


def export_summary(
    items: Sequence[ActivityItem], filters: ActivityFilters, *, now: datetime
) -> dict[str, Any]:
    """Return a JSON-serializable snapshot of ``items``."""

    return {
        "exportDate": now.isoformat(),
        "totalActivities": len(items),
        "filters": {"type": filters.type.value, "timeRange": filters.time_range.value},
        "activities": [
            {
                "id": item.id,
                "date": item.date.isoformat(),
                "type": item.type.value,
                "title": item.title,
                "description": item.description,
                "amount": str(item.amount),
                "status": item.status,
                "investmentName": item.investment_name,
                "paymentMethod": item.payment_method,
                "expectedReturn": (
                    str(item.expected_return) if item.expected_return is not None else None
                ),
                "maturityDate": item.maturity_date.isoformat() if item.maturity_date else None,
            }
            for item in items
        ],
    }


__all__ = [
    "ActivityFilters",
    "CSV_HEADER",
    "TimeRange",
    "TypeFilter",
    "export_csv",
    "export_summary",
    "filter_activities",
    "in_time_range",
    "matches_search",
    "matches_type",
]
