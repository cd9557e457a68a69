"""
Business logic services.
"""

from notification_center.services.notification import NotificationService

__all__ = ["NotificationService"]
