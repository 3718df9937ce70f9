"""Domain entity representing a watchlist entry."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class WatchlistEntry:
    """Offer followed by a user for price updates."""

    id: str | None
    user_id: str
    offer_id: str
    created_at: datetime | None = None


__all__ = ["WatchlistEntry"]
