"""SQLAlchemy model for clearance offers."""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text

from clearlot.infrastructure.database import Base
from clearlot.utils import now_in_app_naive_datetime

from ._ids import generate_id


class OfferModel(Base):
    """Database representation for offers listed by suppliers."""

    __tablename__ = "offer"

    id = Column(String(64), primary_key=True, default=generate_id)
    offer_code = Column(String(20), nullable=False, unique=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String(80), nullable=False, default="")
    location = Column(String(120), nullable=False, default="")
    supplier_id = Column(String(64), ForeignKey("account.id"), nullable=False, index=True)
    original_price = Column(Float, nullable=False)
    current_price = Column(Float, nullable=False)
    previous_price = Column(Float, nullable=True)
    quantity = Column(Integer, nullable=False)
    unit = Column(String(20), nullable=False, default="pcs")
    status = Column(String(20), nullable=False, default="active")
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    rejection_reason = Column(Text, nullable=True)


__all__ = ["OfferModel"]
