"""
Error taxonomy for the notification store.

Absent records are never errors: lookups return ``None`` and deletes of
unknown ids are no-ops. Everything below is raised to the immediate caller
and never retried by the store.
"""

from typing import Optional


class NotificationStoreError(Exception):
    """Base class for all store errors."""
    pass


class InvalidCollectionError(NotificationStoreError):
    """Raised when a collection name is not in the registry."""
    pass


class InitializationError(NotificationStoreError):
    """
    Raised when the storage engine cannot be opened or provisioned,
    or when a collection is requested before initialization finished.
    """
    pass


class StorageError(NotificationStoreError):
    """
    Underlying engine failure during a collection operation.

    The engine's own exception is kept on ``original`` (and as ``__cause__``).
    """

    def __init__(self, message: str, original: Optional[BaseException] = None):
        super().__init__(message)
        self.original = original


class StorageReadError(StorageError):
    """Engine failure during get / get_all / get_many."""
    pass


class StorageWriteError(StorageError):
    """Engine failure during upsert / delete."""
    pass
