"""SQLAlchemy model for purchases."""

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, JSON, String

from clearlot.infrastructure.database import Base
from clearlot.utils import now_in_app_naive_datetime

from ._ids import generate_id


class PurchaseModel(Base):
    """Database representation for an order placed on an offer."""

    __tablename__ = "purchase"

    id = Column(String(64), primary_key=True, default=generate_id)
    offer_id = Column(String(64), ForeignKey("offer.id"), nullable=False, index=True)
    buyer_id = Column(String(64), ForeignKey("account.id"), nullable=False, index=True)
    seller_id = Column(String(64), ForeignKey("account.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    total_amount = Column(Float, nullable=False)
    platform_fee = Column(Float, nullable=False, default=0.0)
    final_amount = Column(Float, nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    previous_status = Column(String(20), nullable=True)
    payment_method = Column(String(30), nullable=False, default="bank-transfer")
    payment_details = Column(JSON, nullable=True)
    delivery_details = Column(JSON, nullable=True)
    purchase_date = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    shipped_at = Column(DateTime(), nullable=True)
    reminder_count = Column(Integer, nullable=False, default=0)
    last_reminder_at = Column(DateTime(), nullable=True)
    admin_notified = Column(Boolean, nullable=False, default=False)


__all__ = ["PurchaseModel"]
