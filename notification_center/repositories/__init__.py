"""
Repository pattern for data access.
"""

from notification_center.repositories.collection import Collection

__all__ = ["Collection"]
