"""Tests for activity filtering and export helpers."""

from __future__ import annotations

import csv
import io
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from finpipe.application.use_cases.activity_filters import (
    CSV_HEADER,
    ActivityFilters,
    TimeRange,
    TypeFilter,
    export_csv,
    export_summary,
    filter_activities,
)
from finpipe.domain.entities import ActivityItem, ActivityType

NOW = datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc)


def _item(item_id: str, activity_type: ActivityType, days_ago: float, **extra) -> ActivityItem:
    values = {
        "id": item_id,
        "type": activity_type,
        "title": extra.pop("title", "Activity"),
        "description": extra.pop("description", "Something happened"),
        "amount": Decimal("100.00"),
        "status": extra.pop("status", "completed"),
        "date": NOW - timedelta(days=days_ago),
    }
    values.update(extra)
    return ActivityItem(**values)


ITEMS = [
    _item("investment-1", ActivityType.INVESTMENT, 1, investment_name="Gold Plan"),
    _item("withdrawal-1", ActivityType.WITHDRAWAL, 10, payment_method="btc", status="pending"),
    _item("return-1", ActivityType.RETURN, 40, investment_name="Gold Plan"),
    _item("transaction-1", ActivityType.DIVIDEND, 100, description="Quarterly dividend"),
]


@pytest.mark.parametrize(
    ("type_filter", "expected"),
    [
        (TypeFilter.ALL, ["investment-1", "withdrawal-1", "return-1", "transaction-1"]),
        (TypeFilter.INVESTMENTS, ["investment-1"]),
        (TypeFilter.WITHDRAWALS, ["withdrawal-1"]),
        (TypeFilter.RETURNS, ["return-1", "transaction-1"]),
    ],
)
def test_type_filter(type_filter: TypeFilter, expected: list[str]) -> None:
    result = filter_activities(ITEMS, ActivityFilters(type=type_filter), now=NOW)

    assert [item.id for item in result] == expected


@pytest.mark.parametrize(
    ("time_range", "expected"),
    [
        (TimeRange.LAST_7_DAYS, ["investment-1"]),
        (TimeRange.LAST_30_DAYS, ["investment-1", "withdrawal-1"]),
        (TimeRange.LAST_90_DAYS, ["investment-1", "withdrawal-1", "return-1"]),
        (TimeRange.ALL, ["investment-1", "withdrawal-1", "return-1", "transaction-1"]),
    ],
)
def test_time_range_filter(time_range: TimeRange, expected: list[str]) -> None:
    result = filter_activities(ITEMS, ActivityFilters(time_range=time_range), now=NOW)

    assert [item.id for item in result] == expected


def test_time_range_rounds_partial_days_up() -> None:
    borderline = [_item("a", ActivityType.DEPOSIT, 6.5), _item("b", ActivityType.DEPOSIT, 7.5)]

    result = filter_activities(
        borderline, ActivityFilters(time_range=TimeRange.LAST_7_DAYS), now=NOW
    )

    assert [item.id for item in result] == ["a"]


def test_search_is_case_insensitive_across_fields() -> None:
    by_name = filter_activities(ITEMS, ActivityFilters(search="gold"), now=NOW)
    by_method = filter_activities(ITEMS, ActivityFilters(search="BTC"), now=NOW)
    by_description = filter_activities(ITEMS, ActivityFilters(search="quarterly"), now=NOW)

    assert [item.id for item in by_name] == ["investment-1", "return-1"]
    assert [item.id for item in by_method] == ["withdrawal-1"]
    assert [item.id for item in by_description] == ["transaction-1"]


def test_filters_do_not_mutate_input() -> None:
    items = list(ITEMS)

    filter_activities(items, ActivityFilters(type=TypeFilter.WITHDRAWALS), now=NOW)

    assert items == ITEMS


def test_is_active_flags_non_default_filters() -> None:
    assert not ActivityFilters().is_active
    assert not ActivityFilters(search="   ").is_active
    assert ActivityFilters(time_range=TimeRange.LAST_7_DAYS).is_active


def test_export_csv_writes_header_and_rows() -> None:
    rows = list(csv.reader(io.StringIO(export_csv(ITEMS[:2]))))

    assert tuple(rows[0]) == CSV_HEADER
    assert rows[1] == ["2025-03-14", "investment", "Something happened", "100.00", "completed", "Gold Plan", ""]
    assert rows[2][1] == "withdrawal"
    assert rows[2][6] == "btc"


def test_export_csv_quotes_embedded_commas() -> None:
    item = _item("x", ActivityType.DEPOSIT, 1, description="Deposit, wire")

    rows = list(csv.reader(io.StringIO(export_csv([item]))))

    assert rows[1][2] == "Deposit, wire"


def test_export_summary_shape() -> None:
    filters = ActivityFilters(type=TypeFilter.RETURNS, time_range=TimeRange.LAST_90_DAYS)

    summary = export_summary(ITEMS[2:3], filters, now=NOW)

    assert summary["exportDate"] == NOW.isoformat()
    assert summary["totalActivities"] == 1
    assert summary["filters"] == {"type": "returns", "timeRange": "90d"}
    assert summary["activities"][0]["id"] == "return-1"
    assert summary["activities"][0]["amount"] == "100.00"
