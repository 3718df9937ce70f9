"""Load purchases for the admin screens and attach offer, buyer and seller."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Optional, TypeVar

import anyio
from sqlalchemy.orm import Session

from clearlot.domain.entities import Account, EnrichedPurchase, Offer, Purchase
from clearlot.infrastructure.repositories import (
    AccountRepository,
    OfferRepository,
    PurchaseRepository,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_LOAD_TIMEOUT = 30.0
DEFAULT_BATCH_SIZE = 2
DEFAULT_BATCH_DELAY = 0.2
DEFAULT_FIELD_TIMEOUT = 3.0

PURCHASE_LOAD_TIMEOUT_MESSAGE = "Loading purchases timed out. Please retry."

OfferFetcher = Callable[[str], Awaitable[Optional[Offer]]]
AccountFetcher = Callable[[str], Awaitable[Optional[Account]]]


class PurchaseLoadTimeoutError(TimeoutError):
    """Raised when the purchase listing does not finish in time."""


async def load_purchases_for_admin(
    fetch_all: Callable[[], Awaitable[Sequence[Purchase]]],
    *,
    timeout: float = DEFAULT_LOAD_TIMEOUT,
) -> list[Purchase]:
    """Return every purchase or raise :class:`PurchaseLoadTimeoutError`."""

    try:
        with anyio.fail_after(timeout):
            purchases = await fetch_all()
    except TimeoutError as exc:
        logger.warning("Purchase listing exceeded %s seconds", timeout)
        raise PurchaseLoadTimeoutError(PURCHASE_LOAD_TIMEOUT_MESSAGE) from exc
    return list(purchases)


async def _lookup(
    fetch: Callable[[str], Awaitable[Optional[T]]],
    key: str | None,
    *,
    label: str,
    purchase_id: str,
    timeout: float,
) -> T | None:
    if not key:
        return None
    with anyio.move_on_after(timeout):
        try:
            return await fetch(key)
        except Exception:
            logger.warning(
                "Fetching %s %s for purchase %s failed", label, key, purchase_id, exc_info=True
            )
            return None
    logger.warning("Fetching %s %s for purchase %s timed out", label, key, purchase_id)
    return None


async def _enrich_one(
    purchase: Purchase,
    fetch_offer: OfferFetcher,
    fetch_account: AccountFetcher,
    timeout: float,
) -> EnrichedPurchase:
    results: dict[str, object] = {}

    async def _store(name: str, fetch, key: str | None) -> None:
        results[name] = await _lookup(
            fetch, key, label=name, purchase_id=purchase.id, timeout=timeout
        )

    async with anyio.create_task_group() as group:
        group.start_soon(_store, "offer", fetch_offer, purchase.offer_id)
        group.start_soon(_store, "buyer", fetch_account, purchase.buyer_id)
        group.start_soon(_store, "seller", fetch_account, purchase.seller_id)

    return EnrichedPurchase(
        purchase=purchase,
        offer=results.get("offer"),  # type: ignore[arg-type]
        buyer=results.get("buyer"),  # type: ignore[arg-type]
        seller=results.get("seller"),  # type: ignore[arg-type]
    )


async def enrich_purchases(
    purchases: Sequence[Purchase],
    fetch_offer: OfferFetcher,
    fetch_account: AccountFetcher,
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    batch_delay: float = DEFAULT_BATCH_DELAY,
    field_timeout: float = DEFAULT_FIELD_TIMEOUT,
) -> list[EnrichedPurchase]:
    """Attach offer, buyer and seller to every purchase, in input order.

    Purchases are processed in small batches separated by ``batch_delay`` to
    keep the load on the database low. A lookup that fails or exceeds
    ``field_timeout`` leaves the corresponding field empty.
    """

    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")

    enriched: list[EnrichedPurchase] = []
    for start in range(0, len(purchases), batch_size):
        if start:
            await anyio.sleep(batch_delay)
        batch = purchases[start : start + batch_size]
        slots: list[EnrichedPurchase | None] = [None] * len(batch)

        async def _run(index: int, purchase: Purchase) -> None:
            slots[index] = await _enrich_one(purchase, fetch_offer, fetch_account, field_timeout)

        async with anyio.create_task_group() as group:
            for index, purchase in enumerate(batch):
                group.start_soon(_run, index, purchase)
        enriched.extend(slot for slot in slots if slot is not None)
        logger.debug("Enriched purchases %s-%s of %s", start + 1, start + len(batch), len(purchases))
    return enriched


def build_repository_fetchers(
    session_factory: Callable[[], Session],
) -> tuple[
    Callable[[], Awaitable[Sequence[Purchase]]],
    OfferFetcher,
    AccountFetcher,
]:
    """Return fetchers running each lookup in its own session on a worker thread."""

    def _call(operation: Callable[[Session], T]) -> Callable[[], T]:
        def _work() -> T:
            session = session_factory()
            try:
                return operation(session)
            finally:
                session.close()

        return _work

    async def fetch_all() -> Sequence[Purchase]:
        return await anyio.to_thread.run_sync(
            _call(lambda session: PurchaseRepository(session).list_all()),
            abandon_on_cancel=True,
        )

    async def fetch_offer(offer_id: str) -> Offer | None:
        return await anyio.to_thread.run_sync(
            _call(lambda session: OfferRepository(session).get(offer_id)),
            abandon_on_cancel=True,
        )

    async def fetch_account(account_id: str) -> Account | None:
        return await anyio.to_thread.run_sync(
            _call(lambda session: AccountRepository(session).get(account_id)),
            abandon_on_cancel=True,
        )

    return fetch_all, fetch_offer, fetch_account


__all__ = [
    "DEFAULT_BATCH_DELAY",
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_FIELD_TIMEOUT",
    "DEFAULT_LOAD_TIMEOUT",
    "PURCHASE_LOAD_TIMEOUT_MESSAGE",
    "PurchaseLoadTimeoutError",
    "build_repository_fetchers",
    "enrich_purchases",
    "load_purchases_for_admin",
]
