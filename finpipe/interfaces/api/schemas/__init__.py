from .activity import ActivityFeedRead, ActivityItemRead, ActivityStatsRead, ExportFormat
from .notification import MaturityNotificationResponse, NotificationResponse

__all__ = [
    "ActivityFeedRead",
    "ActivityItemRead",
    "ActivityStatsRead",
    "ExportFormat",
    "MaturityNotificationResponse",
    "NotificationResponse",
]
