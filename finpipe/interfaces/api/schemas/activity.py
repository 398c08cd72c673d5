"""Pydantic schemas for activity feed endpoints."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from finpipe.domain.entities import ActivityFeed, ActivityItem, ActivityStats


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"


class ActivityItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Identifier namespaced by the source record kind")
    type: str = Field(..., description="Activity category")
    title: str
    description: str
    amount: Decimal
    status: str = Field(..., description="Status as stored by the source record")
    date: datetime
    investment_name: str | None = None
    expected_return: Decimal | None = None
    maturity_date: datetime | None = None
    payment_method: str | None = None

    @classmethod
    def from_item(cls, item: ActivityItem) -> "ActivityItemRead":
        return cls(
            id=item.id,
            type=item.type.value,
            title=item.title,
            description=item.description,
            amount=item.amount,
            status=item.status,
            date=item.date,
            investment_name=item.investment_name,
            expected_return=item.expected_return,
            maturity_date=item.maturity_date,
            payment_method=item.payment_method,
        )


class ActivityStatsRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_activities: int = Field(..., alias="totalActivities")
    active_investments: int = Field(..., alias="activeInvestments")
    pending_requests: int = Field(..., alias="pendingRequests")
    this_month: int = Field(..., alias="thisMonth")

    @classmethod
    def from_stats(cls, stats: ActivityStats) -> "ActivityStatsRead":
        return cls(
            total_activities=stats.total_activities,
            active_investments=stats.active_investments,
            pending_requests=stats.pending_requests,
            this_month=stats.this_month,
        )


class ActivityFeedRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    activities: list[ActivityItemRead] = Field(default_factory=list)
    stats: ActivityStatsRead
    error: str | None = Field(
        default=None, description="Set only when no activity source could be read"
    )
    failed_sources: list[str] = Field(default_factory=list, alias="failedSources")

    @classmethod
    def from_feed(
        cls, feed: ActivityFeed, items: list[ActivityItem] | None = None
    ) -> "ActivityFeedRead":
        selected = feed.items if items is None else items
        return cls(
            activities=[ActivityItemRead.from_item(item) for item in selected],
            stats=ActivityStatsRead.from_stats(feed.stats),
            error=feed.error,
            failed_sources=[kind.value for kind in feed.failed_sources],
        )


__all__ = ["ActivityFeedRead", "ActivityItemRead", "ActivityStatsRead", "ExportFormat"]
