"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import Boolean, Column, DateTime, JSON, String, Text

from clearlot.infrastructure.database import Base
from clearlot.utils import now_in_app_naive_datetime

from ._ids import generate_id


class NotificationModel(Base):
    """Database representation for user notifications."""

    __tablename__ = "notification"

    id = Column(String(64), primary_key=True, default=generate_id)
    user_id = Column(String(64), nullable=False, index=True)
    type = Column(String(40), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False, index=True)
    priority = Column(String(10), nullable=False, default="medium")
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["NotificationModel"]
