"""
Notification table.
"""

from .base import Base, StoredRecordMixin


class NotificationRecord(Base, StoredRecordMixin):
    """
    Persisted StoredNotification.

    The payload holds the notification and its source; the store only
    looks at ``id``.
    """

    __tablename__ = "notifications"
