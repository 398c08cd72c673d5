"""FastAPI dependency utilities."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from fastapi import Request

from finpipe.application.use_cases.activity import ActivityAggregator
from finpipe.application.use_cases.notifications import LifecycleCoordinator
from finpipe.utils import now_in_app_timezone


def get_aggregator(request: Request) -> ActivityAggregator:
    """Return the aggregator wired into the running application."""

    return request.app.state.aggregator


def get_coordinator(request: Request) -> LifecycleCoordinator:
    return request.app.state.coordinator


def get_clock() -> Callable[[], datetime]:
    return now_in_app_timezone


__all__ = ["get_aggregator", "get_clock", "get_coordinator"]
