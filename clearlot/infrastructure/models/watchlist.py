"""SQLAlchemy model for watchlist entries."""

from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint

from clearlot.infrastructure.database import Base
from clearlot.utils import now_in_app_naive_datetime

from ._ids import generate_id


class WatchlistModel(Base):
    """Offer followed by a user."""

    __tablename__ = "watchlist"
    __table_args__ = (UniqueConstraint("user_id", "offer_id", name="uq_watchlist_user_offer"),)

    id = Column(String(64), primary_key=True, default=generate_id)
    user_id = Column(String(64), ForeignKey("account.id"), nullable=False, index=True)
    offer_id = Column(String(64), ForeignKey("offer.id"), nullable=False, index=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["WatchlistModel"]
