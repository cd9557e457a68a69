"""
Typed collection over one named table.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Generic, Iterable, Sequence, Type, TypeVar

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from notification_center.core.exceptions import (
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from notification_center.models.base import StoredRecordMixin
from notification_center.schemas.record import StoredRecord

logger = structlog.get_logger()

RecordT = TypeVar("RecordT", bound=StoredRecord)

# Dialects with a native INSERT ... ON CONFLICT DO UPDATE
UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}

# Keeps every statement below SQLite's bound-parameter limit
CHUNK_SIZE = 450


def _chunks(items: Sequence, size: int = CHUNK_SIZE) -> Iterable[Sequence]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


class Collection(Generic[RecordT]):
    """
    CRUD surface over one collection table.

    Records go in and come out as pydantic schemas; the table keeps each
    one as a JSON payload keyed by ``id``. Every call runs in its own
    transaction, so a single call (batch or not) is atomic.

    Usage:
        notifications = database.get(CollectionName.NOTIFICATIONS)

        await notifications.upsert(record)
        record = await notifications.get(record.id)
        await notifications.delete([a.id, b.id])
    """

    def __init__(
        self,
        name: str,
        model: Type[StoredRecordMixin],
        schema: Type[RecordT],
        session_factory: async_sessionmaker[AsyncSession],
        dialect: str,
    ):
        self.name = name
        self.model = model
        self.schema = schema
        self._session_factory = session_factory
        self._insert = UPSERT_DIALECTS[dialect]

    def __repr__(self) -> str:
        return f"Collection(name={self.name!r}, schema={self.schema.__name__})"

    @asynccontextmanager
    async def _transaction(
        self,
        operation: str,
        error_cls: Type[StorageError],
    ) -> AsyncIterator[AsyncSession]:
        """Session + transaction; engine failures become ``error_cls``."""
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    yield session
        except SQLAlchemyError as e:
            logger.error(
                "storage_operation_failed",
                collection=self.name,
                operation=operation,
                error=str(e),
            )
            raise error_cls(
                f"{operation} on collection '{self.name}' failed: {e}",
                original=e,
            ) from e

    def _load(self, payload: dict) -> RecordT:
        return self.schema.model_validate(payload)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, id: str) -> RecordT | None:
        """Get a record by id, or None if it does not exist."""
        stmt = select(self.model.payload).where(self.model.id == id)
        async with self._transaction("get", StorageReadError) as session:
            payload = await session.scalar(stmt)
        return None if payload is None else self._load(payload)

    async def get_all(self) -> list[RecordT]:
        """Get every record, in the order ids were first written."""
        stmt = select(self.model.payload).order_by(self.model.seq)
        async with self._transaction("get_all", StorageReadError) as session:
            payloads = list((await session.scalars(stmt)).all())
        return [self._load(payload) for payload in payloads]

    async def get_many(self, ids: str | Iterable[str]) -> list[RecordT]:
        """
        Get the records for the given ids.

        Missing ids are skipped and duplicate ids collapse to one entry.
        Results follow the order the ids were supplied in.
        A bare string is one id, as in ``delete``.
        """
        wanted = [ids] if isinstance(ids, str) else list(dict.fromkeys(ids))
        if not wanted:
            return []

        found: dict[str, dict] = {}
        async with self._transaction("get_many", StorageReadError) as session:
            for chunk in _chunks(wanted):
                stmt = select(self.model.id, self.model.payload).where(
                    self.model.id.in_(chunk)
                )
                for row in (await session.execute(stmt)).all():
                    found[row.id] = row.payload

        return [self._load(found[id]) for id in wanted if id in found]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def upsert(self, records: RecordT | Sequence[RecordT]) -> None:
        """
        Insert or fully replace one record or a batch.

        Within a batch, a repeated id keeps its first position and its
        last value.
        """
        batch = [records] if isinstance(records, StoredRecord) else list(records)
        if not batch:
            return

        payloads: dict[str, dict] = {}
        for record in batch:
            payloads[record.id] = record.model_dump(mode="json")
        rows = [{"id": id, "payload": payload} for id, payload in payloads.items()]

        async with self._transaction("upsert", StorageWriteError) as session:
            for chunk in _chunks(rows):
                stmt = self._insert(self.model).values(list(chunk))
                stmt = stmt.on_conflict_do_update(
                    index_elements=[self.model.id],
                    set_={
                        "payload": stmt.excluded.payload,
                        "updated_at": func.now(),
                    },
                )
                await session.execute(stmt)

        logger.debug("records_upserted", collection=self.name, count=len(rows))

    async def delete(self, ids: str | Iterable[str]) -> int:
        """
        Delete one id or many.

        Ids that are not stored are ignored. Returns the number of
        records actually removed.
        """
        targets = [ids] if isinstance(ids, str) else list(dict.fromkeys(ids))
        if not targets:
            return 0

        removed = 0
        async with self._transaction("delete", StorageWriteError) as session:
            for chunk in _chunks(targets):
                result = await session.execute(
                    delete(self.model).where(self.model.id.in_(chunk))
                )
                removed += result.rowcount or 0

        logger.debug("records_deleted", collection=self.name, count=removed)
        return removed


__all__ = ["Collection", "RecordT", "UPSERT_DIALECTS"]
