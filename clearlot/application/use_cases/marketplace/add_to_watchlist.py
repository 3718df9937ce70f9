"""Use case for following an offer."""

from __future__ import annotations

import anyio
from sqlalchemy.orm import Session

from clearlot.domain.entities import WatchlistEntry
from clearlot.infrastructure.notifications import NotificationTriggers
from clearlot.infrastructure.repositories import OfferRepository, WatchlistRepository


async def add_to_watchlist(
    session: Session,
    triggers: NotificationTriggers,
    *,
    user_id: str,
    offer_id: str,
) -> WatchlistEntry:
    """Put an offer on the user's watchlist and confirm it the first time.

    Raises:
        ValueError: If the offer does not exist or belongs to the user.
    """

    def _add():
        offer = OfferRepository(session).get(offer_id)
        if offer is None:
            raise ValueError(f"Offer with id {offer_id} not found")
        if offer.supplier_id == user_id:
            raise ValueError("You cannot add your own offer to the watchlist")
        watchlist = WatchlistRepository(session)
        existing = watchlist.get(user_id, offer_id)
        if existing is not None:
            return offer, existing, False
        return offer, watchlist.add(user_id, offer_id), True

    offer, entry, created = await anyio.to_thread.run_sync(_add)
    if created:
        await triggers.watchlist_added(user_id, offer.title, offer.id)
    return entry
