"""
Tests for the notification service and event handler registry.
"""

import pytest
from structlog.testing import capture_logs

from notification_center.core.events import EventHandlerRegistry, NotificationCenterEvent
from notification_center.models.database import Database
from notification_center.schemas.notification import (
    NotificationInternal,
    SenderInfo,
    StoredNotification,
)
from notification_center.services.notification import NotificationService


class RecordingHandlers:
    """Captures dispatched events."""

    def __init__(self, registry: EventHandlerRegistry):
        self.calls: list[tuple[NotificationCenterEvent, object, object]] = []
        for event in NotificationCenterEvent:
            registry.register(event, self._recorder(event))

    def _recorder(self, event: NotificationCenterEvent):
        async def handler(payload, sender):
            self.calls.append((event, payload, sender))
            return "recorded"
        return handler

    def events(self) -> list[NotificationCenterEvent]:
        return [event for event, _, _ in self.calls]


@pytest.fixture
def registry() -> EventHandlerRegistry:
    return EventHandlerRegistry()


@pytest.fixture
def recorder(registry: EventHandlerRegistry) -> RecordingHandlers:
    return RecordingHandlers(registry)


@pytest.fixture
def service(database: Database, registry: EventHandlerRegistry) -> NotificationService:
    return NotificationService(database, registry)


APP_A = SenderInfo(uuid="app-a", name="App A")
APP_B = SenderInfo(uuid="app-b", name="App B")


# ============ Event registry ============


@pytest.mark.asyncio
async def test_default_handlers_report_success(registry: EventHandlerRegistry):
    record = StoredNotification(
        id="n1",
        notification=NotificationInternal(id="n1"),
        source=APP_A,
    )

    with capture_logs() as logs:
        result = await registry.dispatch(NotificationCenterEvent.NOTIFICATION_CREATED, record, APP_A)
    assert result == "notification-created success"
    assert logs[-1]["event"] == "notification_center_event"
    assert logs[-1]["center_event"] == "notification-created"
    assert logs[-1]["payload"]["id"] == "n1"

    result = await registry.dispatch("app-notifications-cleared", APP_A)
    assert result == "app-notifications-cleared success"

    result = await registry.dispatch(NotificationCenterEvent.ALL_NOTIFICATIONS_CLEARED, SenderInfo(uuid=""))
    assert result == "all-notifications-cleared success"


def test_every_provider_event_has_a_handler(registry: EventHandlerRegistry):
    assert [event.value for event in NotificationCenterEvent] == [
        "notification-created",
        "notification-cleared",
        "app-notifications-cleared",
        "all-notifications-cleared",
    ]
    for event in NotificationCenterEvent:
        assert callable(registry.handler_for(event))


def test_register_logs_the_event(registry: EventHandlerRegistry):
    async def handler(payload, sender):
        return None

    with capture_logs() as logs:
        registry.register(NotificationCenterEvent.NOTIFICATION_CLEARED, handler)

    assert registry.handler_for(NotificationCenterEvent.NOTIFICATION_CLEARED) is handler
    assert logs == [{
        "event": "event_handler_registered",
        "center_event": "notification-cleared",
        "log_level": "debug",
    }]


@pytest.mark.asyncio
async def test_last_registration_wins(registry: EventHandlerRegistry):
    async def first(payload, sender):
        return "first"

    async def second(payload, sender):
        return "second"

    registry.register(NotificationCenterEvent.APP_NOTIFICATIONS_CLEARED, first)
    registry.register(NotificationCenterEvent.APP_NOTIFICATIONS_CLEARED, second)

    assert await registry.dispatch(NotificationCenterEvent.APP_NOTIFICATIONS_CLEARED, APP_A) == "second"


@pytest.mark.asyncio
async def test_reset_restores_default_handler(registry: EventHandlerRegistry):
    async def custom(payload, sender):
        return "custom"

    registry.register(NotificationCenterEvent.APP_NOTIFICATIONS_CLEARED, custom)
    registry.reset(NotificationCenterEvent.APP_NOTIFICATIONS_CLEARED)

    result = await registry.dispatch(NotificationCenterEvent.APP_NOTIFICATIONS_CLEARED, APP_A)
    assert result == "app-notifications-cleared success"


def test_unknown_event_is_rejected(registry: EventHandlerRegistry):
    async def handler(payload, sender):
        return None

    with pytest.raises(ValueError):
        registry.register("toggle-window", handler)

    with pytest.raises(ValueError):
        registry.handler_for("toggle-window")


# ============ Notification service ============


@pytest.mark.asyncio
async def test_create_notification_persists_and_dispatches(
    service: NotificationService,
    recorder: RecordingHandlers,
):
    notification = NotificationInternal(id="build-1", title="Build finished")

    record = await service.create_notification(notification, APP_A)

    assert record == StoredNotification(id="build-1", notification=notification, source=APP_A)
    assert await service.notifications.get("build-1") == record
    assert recorder.calls == [(NotificationCenterEvent.NOTIFICATION_CREATED, record, APP_A)]


@pytest.mark.asyncio
async def test_create_notification_with_same_id_replaces(service: NotificationService):
    await service.create_notification(NotificationInternal(id="n", title="old"), APP_A)
    await service.create_notification(NotificationInternal(id="n", title="new"), APP_A)

    records = await service.fetch_all_notifications()
    assert [r.notification.title for r in records] == ["new"]


@pytest.mark.asyncio
async def test_clear_notification(service: NotificationService, recorder: RecordingHandlers):
    record = await service.create_notification(NotificationInternal(id="n"), APP_A)

    assert await service.clear_notification("n") is True
    assert await service.fetch_all_notifications() == []
    assert recorder.calls[-1] == (NotificationCenterEvent.NOTIFICATION_CLEARED, record, APP_A)


@pytest.mark.asyncio
async def test_clear_missing_notification(service: NotificationService, recorder: RecordingHandlers):
    assert await service.clear_notification("missing") is False
    assert recorder.calls == []


@pytest.mark.asyncio
async def test_fetch_app_notifications(service: NotificationService):
    a1 = await service.create_notification(NotificationInternal(id="a1"), APP_A)
    await service.create_notification(NotificationInternal(id="b1"), APP_B)
    a2 = await service.create_notification(NotificationInternal(id="a2"), APP_A)

    assert await service.fetch_app_notifications("app-a") == [a1, a2]
    assert await service.fetch_app_notifications("unknown") == []


@pytest.mark.asyncio
async def test_clear_app_notifications(service: NotificationService, recorder: RecordingHandlers):
    await service.create_notification(NotificationInternal(id="a1"), APP_A)
    b1 = await service.create_notification(NotificationInternal(id="b1"), APP_B)
    await service.create_notification(NotificationInternal(id="a2"), APP_A)

    removed = await service.clear_app_notifications("app-a")

    assert removed == 2
    assert await service.fetch_all_notifications() == [b1]
    event, payload, _ = recorder.calls[-1]
    assert event == NotificationCenterEvent.APP_NOTIFICATIONS_CLEARED
    assert payload == APP_A


@pytest.mark.asyncio
async def test_clear_app_notifications_for_unknown_app(
    service: NotificationService,
    recorder: RecordingHandlers,
):
    await service.create_notification(NotificationInternal(id="a1"), APP_A)

    assert await service.clear_app_notifications("unknown") == 0
    assert len(await service.fetch_all_notifications()) == 1
    # Nothing removed, nothing announced
    assert recorder.events() == [NotificationCenterEvent.NOTIFICATION_CREATED]


@pytest.mark.asyncio
async def test_clear_all_notifications(service: NotificationService, recorder: RecordingHandlers):
    await service.create_notification(NotificationInternal(id="a1"), APP_A)
    await service.create_notification(NotificationInternal(id="b1"), APP_B)

    assert await service.clear_all_notifications(APP_B) == 2
    assert await service.fetch_all_notifications() == []
    assert recorder.calls[-1] == (NotificationCenterEvent.ALL_NOTIFICATIONS_CLEARED, APP_B, APP_B)

    assert await service.clear_all_notifications() == 0
    assert recorder.events().count(NotificationCenterEvent.ALL_NOTIFICATIONS_CLEARED) == 1


@pytest.mark.asyncio
async def test_clear_all_notifications_without_sender(
    service: NotificationService,
    recorder: RecordingHandlers,
):
    await service.create_notification(NotificationInternal(id="a1"), APP_A)

    assert await service.clear_all_notifications() == 1
    event, payload, sender = recorder.calls[-1]
    assert event == NotificationCenterEvent.ALL_NOTIFICATIONS_CLEARED
    assert payload == SenderInfo(uuid="")
    assert sender is None


@pytest.mark.asyncio
async def test_service_with_default_handlers(database: Database):
    """The full create / clear cycle works with the built-in handlers."""
    service = NotificationService(database)

    await service.create_notification(NotificationInternal(id="a1"), APP_A)
    await service.create_notification(NotificationInternal(id="a2"), APP_A)
    await service.create_notification(NotificationInternal(id="b1"), APP_B)

    assert await service.clear_notification("a1") is True
    assert await service.clear_app_notifications("app-a") == 1
    assert await service.clear_all_notifications() == 1
    assert await service.fetch_all_notifications() == []
