"""
Base model classes and mixins.

Every collection is one table shaped by StoredRecordMixin:
- seq: autoincrement ordering key (first-write order)
- id: caller-assigned identity, unique
- payload: the full record as JSON
"""

from datetime import datetime
from sqlalchemy import JSON, DateTime, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    # Common type annotations - all datetimes are timezone-aware
    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }


class TimestampMixin:
    """
    Mixin for created_at and updated_at timestamps.

    updated_at is refreshed explicitly by upserts, since
    ON CONFLICT updates bypass ORM onupdate hooks.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class StoredRecordMixin(TimestampMixin):
    """
    Table shape shared by every collection.

    Usage:
        class NotificationRecord(Base, StoredRecordMixin):
            __tablename__ = "notifications"
    """

    seq: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    id: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    payload: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
    )
