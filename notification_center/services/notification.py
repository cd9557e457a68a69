"""Provider-side notification operations."""

from typing import Optional

import structlog

from notification_center.core.events import EventHandlerRegistry, NotificationCenterEvent
from notification_center.models.database import CollectionName, Database
from notification_center.repositories.collection import Collection
from notification_center.schemas.notification import (
    NotificationInternal,
    SenderInfo,
    StoredNotification,
)

logger = structlog.get_logger()


class NotificationService:
    """
    Creates, lists and clears notifications on behalf of client apps.

    Changes are pushed to the notification center through the event
    handler registry after they have been persisted.
    """

    def __init__(
        self,
        database: Database,
        handlers: Optional[EventHandlerRegistry] = None,
    ):
        self.database = database
        self.handlers = handlers or EventHandlerRegistry()

    @property
    def notifications(self) -> Collection[StoredNotification]:
        return self.database.get(CollectionName.NOTIFICATIONS)

    async def create_notification(
        self,
        notification: NotificationInternal,
        source: SenderInfo,
    ) -> StoredNotification:
        """Store a notification (replacing one with the same id) and announce it."""
        record = StoredNotification(
            id=notification.id,
            notification=notification,
            source=source,
        )
        await self.notifications.upsert(record)

        logger.info("notification_created", notification_id=record.id, app=source.uuid)
        await self.handlers.dispatch(NotificationCenterEvent.NOTIFICATION_CREATED, record, source)
        return record

    async def clear_notification(
        self,
        notification_id: str,
        sender: Optional[SenderInfo] = None,
    ) -> bool:
        """Remove a notification. Returns False if it was not stored."""
        record = await self.notifications.get(notification_id)
        if record is None:
            return False

        await self.notifications.delete(notification_id)

        logger.info("notification_cleared", notification_id=notification_id)
        await self.handlers.dispatch(
            NotificationCenterEvent.NOTIFICATION_CLEARED,
            record,
            sender or record.source,
        )
        return True

    async def fetch_app_notifications(self, uuid: str) -> list[StoredNotification]:
        """All notifications raised by one application."""
        return [
            record for record in await self.notifications.get_all()
            if record.source.uuid == uuid
        ]

    async def fetch_all_notifications(self) -> list[StoredNotification]:
        return await self.notifications.get_all()

    async def clear_app_notifications(self, uuid: str) -> int:
        """Remove every notification from one application. Returns the count removed."""
        records = await self.fetch_app_notifications(uuid)
        removed = await self.notifications.delete([record.id for record in records])

        logger.info("app_notifications_cleared", app=uuid, count=removed)
        if removed:
            app = records[0].source
            await self.handlers.dispatch(NotificationCenterEvent.APP_NOTIFICATIONS_CLEARED, app, app)
        return removed

    async def clear_all_notifications(self, sender: Optional[SenderInfo] = None) -> int:
        """
        Remove every notification. Returns the count removed.

        ``sender`` identifies who asked; without one the payload is an
        empty SenderInfo, meaning the notification center itself.
        """
        records = await self.notifications.get_all()
        removed = await self.notifications.delete([record.id for record in records])
        logger.info("all_notifications_cleared", count=removed)
        if removed:
            requester = sender or SenderInfo(uuid="")
            await self.handlers.dispatch(
                NotificationCenterEvent.ALL_NOTIFICATIONS_CLEARED,
                requester,
                sender,
            )
        return removed
