"""
Pytest fixtures for testing.

Provides:
- A freshly provisioned database on a temporary SQLite file per test
- The notifications collection bound to it
- A factory for generating stored notifications
"""

from pathlib import Path
from typing import Any, AsyncGenerator

import pytest
import pytest_asyncio

from notification_center.models.database import CollectionName, Database
from notification_center.repositories.collection import Collection
from notification_center.schemas.notification import (
    NotificationInternal,
    SenderInfo,
    StoredNotification,
)


def sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest_asyncio.fixture(scope="function")
async def database(tmp_path: Path) -> AsyncGenerator[Database, None]:
    """Initialized database, disposed after the test."""
    db = Database(url=sqlite_url(tmp_path / "notifications.db"))
    await db.initialize()

    yield db

    await db.close()


@pytest_asyncio.fixture(scope="function")
async def collection(database: Database) -> Collection[StoredNotification]:
    """The notifications collection."""
    return database.get(CollectionName.NOTIFICATIONS)


# ============ Factory Fixtures ============


class NotificationFactory:
    """Factory for generating stored notifications (not persisted)."""

    def __init__(self):
        self.count = 0

    def create(
        self,
        id: str | None = None,
        source: SenderInfo | None = None,
        **notification_fields: Any,
    ) -> StoredNotification:
        self.count += 1
        id = id or f"generatedNotification-{self.count}"
        return StoredNotification(
            id=id,
            notification=NotificationInternal(id=id, date=1, **notification_fields),
            source=source or SenderInfo(uuid="", name=""),
        )

    def create_many(self, count: int, **kwargs: Any) -> list[StoredNotification]:
        return [self.create(**kwargs) for _ in range(count)]


@pytest.fixture
def notification_factory() -> NotificationFactory:
    """Fixture that provides NotificationFactory."""
    return NotificationFactory()
