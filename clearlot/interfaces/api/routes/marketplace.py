"""Endpoints used by buyers and sellers on the marketplace."""

from __future__ import annotations

import anyio
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from clearlot.application.use_cases.accounts import submit_verification_documents
from clearlot.application.use_cases.marketplace import add_to_watchlist, place_purchase
from clearlot.config import get_settings
from clearlot.domain.entities import Account
from clearlot.infrastructure.database import get_db
from clearlot.infrastructure.notifications import (
    NotificationEventBus,
    NotificationStore,
    NotificationTriggers,
)
from clearlot.infrastructure.repositories import WatchlistRepository
from clearlot.interfaces.api.dependencies import (
    get_current_active_account,
    get_notification_bus,
    get_notification_store,
    get_notification_triggers,
)
from clearlot.interfaces.api.schemas import (
    AccountRead,
    PurchaseCreate,
    PurchaseRead,
    VerificationDocumentsSubmit,
    WatchlistEntryRead,
)

router = APIRouter(tags=["marketplace"])


def _value_error_to_http(exc: ValueError) -> HTTPException:
    detail = str(exc)
    status_code = status.HTTP_400_BAD_REQUEST
    if detail.endswith("not found"):
        status_code = status.HTTP_404_NOT_FOUND
    return HTTPException(status_code=status_code, detail=detail)


@router.get("/watchlist", response_model=list[WatchlistEntryRead])
async def list_watchlist(
    db: Session = Depends(get_db),
    current_account: Account = Depends(get_current_active_account),
) -> list[WatchlistEntryRead]:
    entries = await anyio.to_thread.run_sync(
        WatchlistRepository(db).list_for_user, current_account.id
    )
    return [WatchlistEntryRead.from_entity(entry) for entry in entries]


@router.post(
    "/watchlist/{offer_id}",
    response_model=WatchlistEntryRead,
    status_code=status.HTTP_201_CREATED,
)
async def follow_offer(
    offer_id: str,
    db: Session = Depends(get_db),
    triggers: NotificationTriggers = Depends(get_notification_triggers),
    current_account: Account = Depends(get_current_active_account),
) -> WatchlistEntryRead:
    """Follow an offer to hear about its price drops."""

    try:
        entry = await add_to_watchlist(
            db, triggers, user_id=current_account.id, offer_id=offer_id
        )
    except ValueError as exc:
        raise _value_error_to_http(exc) from exc
    return WatchlistEntryRead.from_entity(entry)


@router.post("/purchases", response_model=PurchaseRead, status_code=status.HTTP_201_CREATED)
async def create_purchase(
    payload: PurchaseCreate,
    db: Session = Depends(get_db),
    store: NotificationStore = Depends(get_notification_store),
    bus: NotificationEventBus = Depends(get_notification_bus),
    triggers: NotificationTriggers = Depends(get_notification_triggers),
    current_account: Account = Depends(get_current_active_account),
) -> PurchaseRead:
    """Buy part of an offer and upload the bank transfer receipt for review."""

    try:
        purchase = await place_purchase(
            db,
            store,
            bus,
            triggers,
            buyer=current_account,
            offer_id=payload.offer_id,
            quantity=payload.quantity,
            receipt_url=payload.receipt_url,
            fee_rate=get_settings().platform_fee_rate,
        )
    except ValueError as exc:
        raise _value_error_to_http(exc) from exc
    return PurchaseRead.from_entity(purchase)


@router.put("/accounts/me/verification-documents", response_model=AccountRead)
async def upload_verification_documents(
    payload: VerificationDocumentsSubmit,
    db: Session = Depends(get_db),
    store: NotificationStore = Depends(get_notification_store),
    bus: NotificationEventBus = Depends(get_notification_bus),
    current_account: Account = Depends(get_current_active_account),
) -> AccountRead:
    try:
        account = await submit_verification_documents(
            db, store, bus, account_id=current_account.id, documents=payload.documents
        )
    except ValueError as exc:
        raise _value_error_to_http(exc) from exc
    return AccountRead.from_entity(account)
