"""Use case for repricing an offer."""

from __future__ import annotations

from dataclasses import replace

import anyio
from sqlalchemy.orm import Session

from clearlot.application.use_cases.notifications import check_offer_price_drop, price_drop_ratio
from clearlot.application.use_cases.notifications.events import DEFAULT_PRICE_DROP_THRESHOLD
from clearlot.domain.entities import Notification, Offer
from clearlot.infrastructure.notifications import NotificationEventBus, NotificationStore
from clearlot.infrastructure.repositories import OfferRepository, WatchlistRepository


async def update_offer_price(
    session: Session,
    store: NotificationStore,
    bus: NotificationEventBus,
    *,
    offer_id: str,
    price: float,
    threshold: float = DEFAULT_PRICE_DROP_THRESHOLD,
) -> tuple[Offer, list[Notification]]:
    """Set a new price and alert watchlist users about a significant drop.

    ``previous_price`` holds the last announced price. Small drops leave it in
    place so they add up; a drop of at least ``threshold`` is claimed (moving
    ``previous_price`` to the new price) before anybody is notified, which
    keeps a concurrent watcher sweep from announcing it a second time.

    Raises:
        ValueError: If the price is not positive or the offer does not exist.
    """

    if price <= 0:
        raise ValueError("Price must be greater than zero")

    def _update():
        offers = OfferRepository(session)
        current = offers.get(offer_id)
        if current is None:
            raise ValueError(f"Offer with id {offer_id} not found")
        reference = current.previous_price or current.current_price
        updated = offers.update_prices(
            offer_id, current_price=price, previous_price=reference
        )
        watcher_ids = WatchlistRepository(session).list_user_ids_for_offer(offer_id)
        return updated, watcher_ids

    offer, watcher_ids = await anyio.to_thread.run_sync(_update)
    offers = OfferRepository(session)

    ratio = price_drop_ratio(offer.previous_price, price)
    if ratio > 0 and ratio >= threshold:
        claimed = await anyio.to_thread.run_sync(
            offers.claim_price_drop, offer_id, offer.previous_price, price
        )
        if not claimed:
            return replace(offer, previous_price=price), []
        sent = await check_offer_price_drop(store, bus, offer, watcher_ids, threshold=threshold)
        return replace(offer, previous_price=price), sent

    if offer.previous_price is not None and offer.previous_price <= price:
        offer = await anyio.to_thread.run_sync(
            lambda: offers.update_prices(offer_id, previous_price=price)
        )
    return offer, []
