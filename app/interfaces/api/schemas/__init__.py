from .notification import (
    BookReturnedTrigger,
    BulkNotificationResult,
    BulkNotificationTrigger,
    DeletedCountRead,
    DueDateTrigger,
    NotificationPage,
    NotificationRead,
    NotificationStatsRead,
    PaginationRead,
    RequestDecisionTrigger,
    RequestReceivedTrigger,
    UnreadCountRead,
    UpdatedCountRead,
)

__all__ = [
    "BookReturnedTrigger",
    "BulkNotificationResult",
    "BulkNotificationTrigger",
    "DeletedCountRead",
    "DueDateTrigger",
    "NotificationPage",
    "NotificationRead",
    "NotificationStatsRead",
    "PaginationRead",
    "RequestDecisionTrigger",
    "RequestReceivedTrigger",
    "UnreadCountRead",
    "UpdatedCountRead",
]
