"""Domain entities exposed by the application."""

from .activity import (
    ActivityFeed,
    ActivityItem,
    ActivityStats,
    ActivityType,
    RecordKind,
)
from .notification import (
    DeliveryErrorCode,
    DeliveryOutcome,
    DispatchSummary,
    InvestmentRequestData,
    LifecycleEvent,
    MaturedInvestment,
    MaturityBatchEvent,
    MaturityNoticeEvent,
    NotificationAction,
    NotificationEvent,
    Recipient,
    RenderedMessage,
    RequestKind,
    UserRef,
    WithdrawalRequestData,
)

__all__ = [
    "ActivityFeed",
    "ActivityItem",
    "ActivityStats",
    "ActivityType",
    "RecordKind",
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
