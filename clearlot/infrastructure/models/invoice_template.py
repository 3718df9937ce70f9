"""SQLAlchemy model for invoice templates."""

from sqlalchemy import Boolean, Column, DateTime, JSON, String

from clearlot.infrastructure.database import Base
from clearlot.utils import now_in_app_naive_datetime

from ._ids import generate_id


class InvoiceTemplateModel(Base):
    """Stored invoice layout settings."""

    __tablename__ = "invoice_template"

    id = Column(String(64), primary_key=True, default=generate_id)
    name = Column(String(120), nullable=False)
    is_default = Column(Boolean, nullable=False, default=False)
    settings = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    updated_at = Column(DateTime(), nullable=True)


__all__ = ["InvoiceTemplateModel"]
