"""Utility helpers for reusable functionality."""

from .concurrency import TaskResult, gather_settled
from .numbers import to_decimal
from .datetime import (
    ensure_utc,
    get_app_timezone,
    now_in_app_timezone,
    parse_timestamp,
)

__all__ = [
    "TaskResult",
    "ensure_utc",
    "gather_settled",
    "get_app_timezone",
    "now_in_app_timezone",
    "parse_timestamp",
    "to_decimal",
]
