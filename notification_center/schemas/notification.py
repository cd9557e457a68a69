"""
Notification schemas.
"""

import time
from typing import Any, Optional

from pydantic import BaseModel, Field

from notification_center.schemas.record import StoredRecord


def _now_ms() -> int:
    return int(time.time() * 1000)


class ButtonOptions(BaseModel):
    """Button rendered on a notification card."""
    title: str
    icon: str = ""
    on_click: Optional[dict[str, Any]] = None


class NotificationInternal(BaseModel):
    """
    Notification as raised by a client application.

    ``date`` and ``expires`` are epoch milliseconds. ``on_select``,
    ``on_expire`` and ``on_close`` are opaque action payloads handed back
    to the sender when the matching event fires.
    """
    id: str = Field(min_length=1)
    title: str = ""
    body: str = ""
    category: str = ""
    icon: str = ""
    custom_data: dict[str, Any] = Field(default_factory=dict)
    date: int = Field(default_factory=_now_ms)
    expires: Optional[int] = None
    buttons: list[ButtonOptions] = Field(default_factory=list)
    on_select: Optional[dict[str, Any]] = None
    on_expire: Optional[dict[str, Any]] = None
    on_close: Optional[dict[str, Any]] = None


class SenderInfo(BaseModel):
    """Identity of the application that raised a notification."""
    uuid: str
    name: str = ""


class StoredNotification(StoredRecord):
    """A notification plus its source, as persisted by the provider."""
    notification: NotificationInternal
    source: SenderInfo
