"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from clearlot.domain.entities import Notification

NotificationPriority = Literal["low", "medium", "high"]


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    user_id: str
    type: str
    title: str
    message: str
    is_read: bool
    priority: NotificationPriority
    data: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None

    @classmethod
    def from_entity(cls, notification: Notification) -> "NotificationRead":
        return cls(
            id=notification.id or "",
            user_id=notification.user_id,
            type=notification.type,
            title=notification.title,
            message=notification.message,
            is_read=notification.is_read,
            priority=notification.priority,
            data=dict(notification.data or {}),
            created_at=notification.created_at,
        )


class UnreadCountResponse(BaseModel):
    unread_count: int


class CleanupResponse(BaseModel):
    removed: int


__all__ = ["CleanupResponse", "NotificationPriority", "NotificationRead", "UnreadCountResponse"]
