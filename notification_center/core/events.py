"""
Event handler registry for notification center events.

Each event kind has exactly one handler. Registering again replaces the
previous handler (last registration wins). Handlers are async and receive
the event payload plus the sender that caused it.

Example usage:
```python
handlers = EventHandlerRegistry()

async def on_created(record: StoredNotification, sender: SenderInfo | None):
    await ui.render(record)

handlers.register(NotificationCenterEvent.NOTIFICATION_CREATED, on_created)
await handlers.dispatch(NotificationCenterEvent.NOTIFICATION_CREATED, record, sender)
```
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Awaitable, Callable, Literal, Optional, Union, overload

import structlog

from notification_center.schemas.notification import SenderInfo, StoredNotification

logger = structlog.get_logger()


class NotificationCenterEvent(str, Enum):
    """Events the provider pushes to the notification center UI."""
    NOTIFICATION_CREATED = "notification-created"
    NOTIFICATION_CLEARED = "notification-cleared"
    APP_NOTIFICATIONS_CLEARED = "app-notifications-cleared"
    ALL_NOTIFICATIONS_CLEARED = "all-notifications-cleared"


NotificationHandler = Callable[[StoredNotification, Optional[SenderInfo]], Awaitable[Any]]
AppHandler = Callable[[SenderInfo, Optional[SenderInfo]], Awaitable[Any]]
EventHandler = Union[NotificationHandler, AppHandler]


def _default_handler(event: NotificationCenterEvent) -> EventHandler:
    async def handler(payload: Any, sender: Optional[SenderInfo]) -> str:
        logger.info(
            "notification_center_event",
            center_event=event.value,
            payload=payload.model_dump(mode="json"),
            sender=sender.model_dump(mode="json") if sender else None,
        )
        return f"{event.value} success"

    return handler


class EventHandlerRegistry:
    """Holds one handler per NotificationCenterEvent."""

    def __init__(self):
        self._handlers: dict[NotificationCenterEvent, EventHandler] = {
            event: _default_handler(event) for event in NotificationCenterEvent
        }

    @staticmethod
    def _event(event: NotificationCenterEvent | str) -> NotificationCenterEvent:
        try:
            return NotificationCenterEvent(event)
        except ValueError:
            raise ValueError(f"Unknown notification center event: {event!r}") from None

    @overload
    def register(
        self,
        event: Literal[
            NotificationCenterEvent.NOTIFICATION_CREATED,
            NotificationCenterEvent.NOTIFICATION_CLEARED,
        ],
        handler: NotificationHandler,
    ) -> None: ...

    @overload
    def register(
        self,
        event: Literal[
            NotificationCenterEvent.APP_NOTIFICATIONS_CLEARED,
            NotificationCenterEvent.ALL_NOTIFICATIONS_CLEARED,
        ],
        handler: AppHandler,
    ) -> None: ...

    def register(self, event, handler) -> None:
        """Set the handler for an event, replacing any previous one."""
        event = self._event(event)
        self._handlers[event] = handler
        logger.debug("event_handler_registered", center_event=event.value)

    def reset(self, event: NotificationCenterEvent | str | None = None) -> None:
        """Restore the default handler for one event, or for all."""
        events = [self._event(event)] if event is not None else list(NotificationCenterEvent)
        for e in events:
            self._handlers[e] = _default_handler(e)

    def handler_for(self, event: NotificationCenterEvent | str) -> EventHandler:
        return self._handlers[self._event(event)]

    async def dispatch(
        self,
        event: NotificationCenterEvent | str,
        payload: StoredNotification | SenderInfo,
        sender: Optional[SenderInfo] = None,
    ) -> Any:
        """Invoke the current handler for ``event`` and return its result."""
        return await self.handler_for(event)(payload, sender)
