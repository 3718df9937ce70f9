"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy.orm import Session

from clearlot.domain.entities import Notification
from clearlot.infrastructure.models import NotificationModel
from clearlot.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class NotificationRepository:
    """Provide CRUD operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_for_user(
        self,
        user_id: str,
        *,
        limit: int | None = 50,
    ) -> Sequence[Notification]:
        query = self.session.query(NotificationModel)
        query = query.filter(NotificationModel.user_id == user_id)
        query = query.order_by(NotificationModel.created_at.desc())
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def get(self, notification_id: str) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model else None

    def count_unread(self, user_id: str) -> int:
        return (
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.is_read.is_(False))
            .count()
        )

    def create(self, notification: Notification) -> Notification:
        model = NotificationModel(
            user_id=notification.user_id,
            type=notification.type,
            title=notification.title,
            message=notification.message,
            is_read=bool(notification.is_read),
            priority=notification.priority,
            data=dict(notification.data or {}),
            created_at=ensure_app_naive_datetime(
                notification.created_at or now_in_app_timezone()
            ),
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def mark_as_read(self, notification_id: str) -> str | None:
        """Flag the notification as read and return its owner id."""

        model = self.session.get(NotificationModel, notification_id)
        if model is None:
            return None
        model.is_read = True
        self.session.add(model)
        self.session.commit()
        return model.user_id

    def mark_all_as_read(self, user_id: str) -> int:
        updated = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.is_read.is_(False))
            .update({NotificationModel.is_read: True}, synchronize_session=False)
        )
        self.session.commit()
        return int(updated or 0)

    def delete(self, notification_id: str) -> str | None:
        """Remove the notification and return its owner id."""

        model = self.session.get(NotificationModel, notification_id)
        if model is None:
            return None
        owner_id = model.user_id
        self.session.delete(model)
        self.session.commit()
        return owner_id

    def delete_all_for_user(self, user_id: str) -> int:
        deleted = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return int(deleted or 0)

    def delete_older_than(self, user_id: str, cutoff: datetime) -> int:
        deleted = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.created_at < ensure_app_naive_datetime(cutoff))
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return int(deleted or 0)

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            type=model.type,
            title=model.title,
            message=model.message,
            is_read=bool(model.is_read),
            priority=model.priority,
            data=dict(model.data or {}),
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["NotificationRepository"]
