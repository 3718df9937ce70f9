"""Background checks started alongside a notification session.

Every watcher follows the aggregator contract: calling one starts its work
and returns a handle that stops it. The work is a sweep that catches up on
changes nobody has been notified about yet, for example a purchase status
edited directly in the database. Watchers with an ``interval`` repeat the
sweep until they are stopped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import TypeVar

import anyio
from sqlalchemy.orm import Session

from clearlot.domain.entities import PURCHASE_STATUS_SHIPPED
from clearlot.infrastructure.notifications import NotificationEventBus, NotificationStore
from clearlot.infrastructure.repositories import (
    AccountRepository,
    OfferRepository,
    PurchaseRepository,
    WatchlistRepository,
)
from clearlot.utils import now_in_app_timezone

from .events import (
    DEFAULT_PRICE_DROP_THRESHOLD,
    UNKNOWN_BUYER,
    check_offer_price_drop,
    notify_delivery_escalation,
    notify_delivery_reminder,
    notify_order_status_changed,
    price_drop_ratio,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

SessionFactory = Callable[[], Session]


class _SweepWatcher:
    """Run :meth:`sweep` as a task on the current event loop."""

    name = "watcher"
    interval: float | None = None

    def __init__(
        self,
        user_id: str,
        session_factory: SessionFactory,
        store: NotificationStore,
        bus: NotificationEventBus,
    ) -> None:
        self.user_id = user_id
        self._session_factory = session_factory
        self._store = store
        self._bus = bus

    def __call__(self) -> Callable[[], None]:
        task = asyncio.get_running_loop().create_task(self._run())
        return task.cancel

    async def _run(self) -> None:
        while True:
            try:
                await self.sweep()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("%s sweep failed for %s", self.name, self.user_id)
            if self.interval is None:
                return
            await anyio.sleep(self.interval)

    async def _with_session(self, operation: Callable[[Session], T]) -> T:
        def _work() -> T:
            session = self._session_factory()
            try:
                return operation(session)
            finally:
                session.close()

        return await anyio.to_thread.run_sync(_work)

    async def sweep(self) -> int:  # pragma: no cover - overridden
        raise NotImplementedError


class OrderStatusWatcher(_SweepWatcher):
    """Notify about purchase status changes that were never announced."""

    name = "Order status watcher"

    async def sweep(self) -> int:
        purchases = await self._with_session(
            lambda session: PurchaseRepository(session).list_for_user(self.user_id)
        )
        changed = [
            purchase for purchase in purchases if purchase.previous_status != purchase.status
        ]
        announced = 0
        for purchase in changed:
            claimed = await self._with_session(
                lambda session, purchase=purchase: PurchaseRepository(
                    session
                ).acknowledge_status(purchase.id, purchase.previous_status)
            )
            if not claimed:
                continue
            offer, buyer = await self._with_session(
                lambda session, purchase=purchase: (
                    OfferRepository(session).get(purchase.offer_id),
                    AccountRepository(session).get(purchase.buyer_id),
                )
            )
            if offer is None:
                logger.info("Offer %s not found for purchase %s", purchase.offer_id, purchase.id)
                continue
            await notify_order_status_changed(
                self._store,
                self._bus,
                purchase,
                offer_title=offer.title,
                previous_status=purchase.previous_status,
                buyer_company=buyer.company if buyer else None,
            )
            announced += 1
        return announced


class PriceWatcher(_SweepWatcher):
    """Announce price drops on the offers of the user's watchlist."""

    name = "Price watcher"

    def __init__(
        self,
        user_id: str,
        session_factory: SessionFactory,
        store: NotificationStore,
        bus: NotificationEventBus,
        *,
        threshold: float = DEFAULT_PRICE_DROP_THRESHOLD,
    ) -> None:
        super().__init__(user_id, session_factory, store, bus)
        self.threshold = threshold

    async def sweep(self) -> int:
        def _load(session: Session):
            entries = WatchlistRepository(session).list_for_user(self.user_id)
            return OfferRepository(session).list_by_ids(entry.offer_id for entry in entries)

        offers = await self._with_session(_load)
        announced = 0
        for offer in offers:
            ratio = price_drop_ratio(offer.previous_price, offer.current_price)
            if ratio <= 0 or ratio < self.threshold:
                continue
            claimed = await self._with_session(
                lambda session, offer=offer: OfferRepository(session).claim_price_drop(
                    offer.id, offer.previous_price, offer.current_price
                )
            )
            if not claimed:
                continue
            watcher_ids = await self._with_session(
                lambda session, offer=offer: WatchlistRepository(
                    session
                ).list_user_ids_for_offer(offer.id)
            )
            await check_offer_price_drop(
                self._store, self._bus, offer, watcher_ids, threshold=self.threshold
            )
            announced += 1
        return announced


class DeliveryReminderWatcher(_SweepWatcher):
    """Remind buyers to confirm shipped orders and escalate long silences.

    A shipped purchase earns a reminder every ``reminder_interval`` counted
    from the last reminder (or from shipping). Once ``escalate_after`` has
    passed since shipping, every administrator hears about it a single time.
    """

    name = "Delivery reminder watcher"

    def __init__(
        self,
        user_id: str,
        session_factory: SessionFactory,
        store: NotificationStore,
        bus: NotificationEventBus,
        *,
        reminder_interval: timedelta = timedelta(hours=1),
        escalate_after: timedelta = timedelta(hours=6),
        check_interval: float | None = None,
        clock: Callable[[], datetime] = now_in_app_timezone,
    ) -> None:
        super().__init__(user_id, session_factory, store, bus)
        self.reminder_interval = reminder_interval
        self.escalate_after = escalate_after
        self.interval = check_interval
        self._clock = clock

    async def sweep(self) -> int:
        purchases = await self._with_session(
            lambda session: PurchaseRepository(session).list_for_user(self.user_id)
        )
        now = self._clock()
        reminded = 0
        for purchase in purchases:
            if purchase.status != PURCHASE_STATUS_SHIPPED or purchase.shipped_at is None:
                continue
            last = purchase.last_reminder_at or purchase.shipped_at
            if now - last < self.reminder_interval:
                continue
            claimed = await self._with_session(
                lambda session, purchase=purchase: PurchaseRepository(session).claim_reminder(
                    purchase.id, purchase.reminder_count, now
                )
            )
            if not claimed:
                continue
            offer, accounts = await self._with_session(
                lambda session, purchase=purchase: (
                    OfferRepository(session).get(purchase.offer_id),
                    AccountRepository(session).get_map_by_ids(
                        (purchase.buyer_id, purchase.seller_id)
                    ),
                )
            )
            offer_title = offer.title if offer else "商品"
            await notify_delivery_reminder(
                self._store,
                self._bus,
                purchase,
                offer_title=offer_title,
                reminder_count=purchase.reminder_count + 1,
            )
            reminded += 1

            if purchase.admin_notified or now - purchase.shipped_at < self.escalate_after:
                continue
            escalated = await self._with_session(
                lambda session, purchase=purchase: PurchaseRepository(
                    session
                ).claim_admin_escalation(purchase.id)
            )
            if not escalated:
                continue
            admins = await self._with_session(
                lambda session: AccountRepository(session).list_admins()
            )
            buyer = accounts.get(purchase.buyer_id)
            seller = accounts.get(purchase.seller_id)
            await notify_delivery_escalation(
                self._store,
                self._bus,
                purchase,
                admins,
                offer_title=offer_title,
                buyer_company=buyer.company if buyer else UNKNOWN_BUYER,
                seller_company=seller.company if seller else "Unknown Seller",
            )
        return reminded


__all__ = ["DeliveryReminderWatcher", "OrderStatusWatcher", "PriceWatcher"]
