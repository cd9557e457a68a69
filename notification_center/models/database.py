"""
Database connection and collection registry.

The Database owns the single async engine for the process. It is opened
lazily by ``initialize()``, which every collaborator awaits before asking
for a collection:

    database = get_database()
    await database.initialize()
    notifications = database.get(CollectionName.NOTIFICATIONS)
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Optional, Type, overload

import structlog
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from notification_center.core.config import get_settings
from notification_center.core.exceptions import (
    InitializationError,
    InvalidCollectionError,
)
from notification_center.models.base import Base, StoredRecordMixin
from notification_center.models.notification import NotificationRecord
from notification_center.repositories.collection import UPSERT_DIALECTS, Collection
from notification_center.schemas.notification import StoredNotification
from notification_center.schemas.record import StoredRecord

logger = structlog.get_logger()


class CollectionName(str, Enum):
    """Every collection the store provisions."""
    NOTIFICATIONS = "notifications"


@dataclass(frozen=True)
class CollectionSpec:
    """Binds a collection name to its table and record schema."""
    model: Type[StoredRecordMixin]
    schema: Type[StoredRecord]


COLLECTIONS: dict[CollectionName, CollectionSpec] = {
    CollectionName.NOTIFICATIONS: CollectionSpec(
        model=NotificationRecord,
        schema=StoredNotification,
    ),
}


def _ensure_sqlite_dir(url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    database = make_url(url).database
    if database and database != ":memory:" and not database.startswith("file:"):
        Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)


class Database:
    """
    Owner of the storage engine and factory for typed collections.

    ``initialize()`` runs the physical open exactly once, no matter how
    many callers await it or how concurrently; a failure is kept and
    re-raised to every later caller.
    """

    def __init__(self, url: Optional[str] = None, echo: Optional[bool] = None):
        db_settings = get_settings().database
        self.url = url or db_settings.url
        self.echo = db_settings.echo if echo is None else echo

        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._init_task: Optional[asyncio.Task] = None
        self._collections: dict[CollectionName, Collection[Any]] = {}

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise InitializationError("Database has not been initialized")
        return self._engine

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> "Database":
        """Open and provision the store (idempotent). Returns self."""
        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._open())
        # A cancelled waiter must not abort the open for everyone else
        await asyncio.shield(self._init_task)
        return self

    delayed_init = initialize

    async def _open(self) -> None:
        try:
            backend = make_url(self.url).get_backend_name()
        except SQLAlchemyError as e:
            logger.error("database_invalid_url", error=str(e))
            raise InitializationError(f"Invalid storage URL: {e}") from e

        if backend not in UPSERT_DIALECTS:
            logger.error("database_unsupported_backend", backend=backend)
            raise InitializationError(
                f"Unsupported storage backend '{backend}' "
                f"(expected one of {sorted(UPSERT_DIALECTS)})"
            )

        engine: Optional[AsyncEngine] = None
        try:
            if backend == "sqlite":
                _ensure_sqlite_dir(self.url)

            options: dict[str, Any] = {"echo": self.echo}
            if backend == "sqlite" and ":memory:" in self.url:
                # One shared connection, otherwise each checkout sees an empty db
                options.update(
                    connect_args={"check_same_thread": False},
                    poolclass=StaticPool,
                )
            engine = create_async_engine(self.url, **options)

            tables = [spec.model.__table__ for spec in COLLECTIONS.values()]
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all, tables=tables)
        except (SQLAlchemyError, OSError, ImportError) as e:
            logger.error("database_initialization_failed", backend=backend, error=str(e))
            if engine is not None:
                await engine.dispose()
            raise InitializationError(f"Could not open storage: {e}") from e

        self._engine = engine
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info(
            "database_initialized",
            backend=backend,
            collections=[name.value for name in COLLECTIONS],
        )

    async def close(self) -> None:
        """Dispose the engine. Only needed for tests and orderly shutdown."""
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        self._init_task = None
        self._collections.clear()

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    @overload
    def get(self, name: Literal[CollectionName.NOTIFICATIONS]) -> Collection[StoredNotification]: ...

    @overload
    def get(self, name: CollectionName | str) -> Collection[Any]: ...

    def get(self, name):
        """
        Get the collection registered under ``name``.

        Raises InvalidCollectionError for names outside the registry and
        InitializationError if ``initialize()`` has not completed.
        """
        try:
            key = CollectionName(name)
        except (ValueError, TypeError):
            raise InvalidCollectionError(f"Unknown collection: {name!r}") from None

        if self._session_factory is None or self._engine is None:
            raise InitializationError(
                f"Collection '{key.value}' requested before the database was initialized"
            )

        collection = self._collections.get(key)
        if collection is None:
            spec = COLLECTIONS[key]
            collection = Collection(
                name=key.value,
                model=spec.model,
                schema=spec.schema,
                session_factory=self._session_factory,
                dialect=self._engine.dialect.name,
            )
            self._collections[key] = collection
        return collection


@lru_cache
def get_database() -> Database:
    """Get the process-wide Database instance."""
    return Database()
