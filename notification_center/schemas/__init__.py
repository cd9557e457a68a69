"""
Record schemas stored in collections.
"""

from notification_center.schemas.record import StoredRecord
from notification_center.schemas.notification import (
    ButtonOptions,
    NotificationInternal,
    SenderInfo,
    StoredNotification,
)

__all__ = [
    "StoredRecord",
    "ButtonOptions",
    "NotificationInternal",
    "SenderInfo",
    "StoredNotification",
]
