"""
Base schema for anything kept in a collection.
"""

from pydantic import BaseModel, Field


class StoredRecord(BaseModel):
    """
    Record with a caller-assigned identity.

    ``id`` is unique within its collection and is never generated by the
    store. Every other field is opaque payload.
    """
    id: str = Field(min_length=1)
