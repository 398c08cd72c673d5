"""Endpoints exposing a user's merged activity timeline."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Callable

from fastapi import APIRouter, Depends, Query, Response

from finpipe.application.use_cases.activity import ActivityAggregator
from finpipe.application.use_cases.activity_filters import (
    ActivityFilters,
    TimeRange,
    TypeFilter,
    export_csv,
    export_summary,
    filter_activities,
)
from finpipe.interfaces.api.dependencies import get_aggregator, get_clock
from finpipe.interfaces.api.schemas import ActivityFeedRead, ExportFormat

router = APIRouter(prefix="/activity", tags=["activity"])


def _build_filters(type_filter: TypeFilter, time_range: TimeRange, search: str) -> ActivityFilters:
    return ActivityFilters(type=type_filter, time_range=time_range, search=search)


@router.get("/{owner_id}", response_model=ActivityFeedRead)
async def read_activity(
    owner_id: str,
    type_filter: TypeFilter = Query(TypeFilter.ALL, alias="type", description="Activity category"),
    time_range: TimeRange = Query(TimeRange.ALL, description="How far back to look"),
    search: str = Query("", description="Case-insensitive text search"),
    aggregator: ActivityAggregator = Depends(get_aggregator),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> ActivityFeedRead:
    """Return the owner's timeline, newest first, with rollup stats.

    Stats always describe the whole timeline; filters only narrow the
    returned activities.
    """

    feed = await aggregator.aggregate(owner_id)
    filters = _build_filters(type_filter, time_range, search)
    items = filter_activities(feed.items, filters, now=clock()) if filters.is_active else feed.items
    return ActivityFeedRead.from_feed(feed, items)


@router.get("/{owner_id}/export")
async def export_activity(
    owner_id: str,
    export_format: ExportFormat = Query(ExportFormat.CSV, alias="format"),
    type_filter: TypeFilter = Query(TypeFilter.ALL, alias="type"),
    time_range: TimeRange = Query(TimeRange.ALL),
    search: str = Query(""),
    aggregator: ActivityAggregator = Depends(get_aggregator),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> Response:
    """Download the (optionally filtered) timeline as CSV or JSON."""

    now = clock()
    feed = await aggregator.aggregate(owner_id)
    filters = _build_filters(type_filter, time_range, search)
    items = filter_activities(feed.items, filters, now=now)
    filename = f"activity-{now:%Y-%m-%d}.{export_format.value}"
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}

    if export_format is ExportFormat.JSON:
        content = json.dumps(export_summary(items, filters, now=now), indent=2)
        return Response(content=content, media_type="application/json", headers=headers)
    return Response(content=export_csv(items), media_type="text/csv", headers=headers)


__all__ = ["router"]
