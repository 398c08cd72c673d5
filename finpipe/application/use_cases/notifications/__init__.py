"""Rendering, delivery and coordination of lifecycle e-mails."""

from .dispatcher import NotificationDispatcher, PlannedDelivery
from .lifecycle import LifecycleCoordinator, TransitionResult, TransitionStatus
from .templates import format_date, format_money, render

__all__ = [
    "LifecycleCoordinator",
    "NotificationDispatcher",
    "PlannedDelivery",
    "TransitionResult",
    "TransitionStatus",
    "format_date",
    "format_money",
    "render",
]
