"""
Database models.
"""

from .base import Base, TimestampMixin, StoredRecordMixin
from .notification import NotificationRecord

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "StoredRecordMixin",
    # Models
    "NotificationRecord",
]
