"""SQLAlchemy model for marketplace accounts."""

from sqlalchemy import Boolean, Column, DateTime, JSON, String, Text

from clearlot.infrastructure.database import Base
from clearlot.utils import now_in_app_naive_datetime

from ._ids import generate_id


class AccountModel(Base):
    """Database representation for company accounts."""

    __tablename__ = "account"

    id = Column(String(64), primary_key=True, default=generate_id)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)
    company = Column(String(200), nullable=False)
    name = Column(String(120), nullable=True)
    phone = Column(String(40), nullable=True)
    is_admin = Column(Boolean, nullable=False, default=False)
    status = Column(String(30), nullable=False, default="active")
    verification_status = Column(String(30), nullable=False, default="not_submitted")
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    verification_documents = Column(JSON, nullable=True)
    verification_submitted_at = Column(DateTime(), nullable=True)
    verification_notes = Column(Text, nullable=True)


__all__ = ["AccountModel"]
