"""Administrator endpoints changing purchases, offers and accounts."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from clearlot.application.use_cases.admin import (
    review_offer,
    review_payment_receipt,
    review_verification,
)
from clearlot.application.use_cases.marketplace import (
    update_account_status,
    update_offer_price,
    update_purchase_status,
    update_verification_status,
)
from clearlot.config import get_settings
from clearlot.domain.entities import Account
from clearlot.infrastructure.database import get_db
from clearlot.infrastructure.notifications import (
    NotificationEventBus,
    NotificationStore,
    NotificationTriggers,
)
from clearlot.interfaces.api.dependencies import (
    get_notification_bus,
    get_notification_store,
    get_notification_triggers,
    require_admin,
)
from clearlot.interfaces.api.schemas import (
    AccountRead,
    AccountStatusUpdate,
    NotificationRead,
    OfferPriceResponse,
    OfferPriceUpdate,
    OfferRead,
    PurchaseRead,
    PurchaseStatusResponse,
    PurchaseStatusUpdate,
    ReviewDecision,
    VerificationStatusUpdate,
)

router = APIRouter(prefix="/admin", tags=["admin"])


def _value_error_to_http(exc: ValueError) -> HTTPException:
    detail = str(exc)
    status_code = status.HTTP_400_BAD_REQUEST
    if detail.endswith("not found"):
        status_code = status.HTTP_404_NOT_FOUND
    return HTTPException(status_code=status_code, detail=detail)


@router.patch("/purchases/{purchase_id}/status", response_model=PurchaseStatusResponse)
async def change_purchase_status(
    purchase_id: str,
    payload: PurchaseStatusUpdate,
    db: Session = Depends(get_db),
    store: NotificationStore = Depends(get_notification_store),
    bus: NotificationEventBus = Depends(get_notification_bus),
    _: Account = Depends(require_admin),
) -> PurchaseStatusResponse:
    """Move a purchase to a new status and notify buyer and seller."""

    try:
        purchase, sent = await update_purchase_status(
            db, store, bus, purchase_id=purchase_id, status=payload.status
        )
    except ValueError as exc:
        raise _value_error_to_http(exc) from exc
    return PurchaseStatusResponse(
        purchase=PurchaseRead.from_entity(purchase),
        notifications=[NotificationRead.from_entity(item) for item in sent],
    )


@router.patch("/offers/{offer_id}/price", response_model=OfferPriceResponse)
async def change_offer_price(
    offer_id: str,
    payload: OfferPriceUpdate,
    db: Session = Depends(get_db),
    store: NotificationStore = Depends(get_notification_store),
    bus: NotificationEventBus = Depends(get_notification_bus),
    _: Account = Depends(require_admin),
) -> OfferPriceResponse:
    """Reprice an offer; watchlist users hear about significant drops."""

    try:
        offer, sent = await update_offer_price(
            db,
            store,
            bus,
            offer_id=offer_id,
            price=payload.price,
            threshold=get_settings().price_drop_threshold,
        )
    except ValueError as exc:
        raise _value_error_to_http(exc) from exc
    return OfferPriceResponse(
        offer=OfferRead.from_entity(offer),
        notifications=[NotificationRead.from_entity(item) for item in sent],
    )


@router.patch("/accounts/{account_id}/status", response_model=AccountRead)
async def change_account_status(
    account_id: str,
    payload: AccountStatusUpdate,
    db: Session = Depends(get_db),
    store: NotificationStore = Depends(get_notification_store),
    bus: NotificationEventBus = Depends(get_notification_bus),
    _: Account = Depends(require_admin),
) -> AccountRead:
    try:
        account = await update_account_status(
            db, store, bus, account_id=account_id, status=payload.status
        )
    except ValueError as exc:
        raise _value_error_to_http(exc) from exc
    return AccountRead.from_entity(account)


@router.patch("/accounts/{account_id}/verification", response_model=AccountRead)
async def change_verification_status(
    account_id: str,
    payload: VerificationStatusUpdate,
    db: Session = Depends(get_db),
    store: NotificationStore = Depends(get_notification_store),
    bus: NotificationEventBus = Depends(get_notification_bus),
    _: Account = Depends(require_admin),
) -> AccountRead:
    try:
        account = await update_verification_status(
            db,
            store,
            bus,
            account_id=account_id,
            verification_status=payload.verification_status,
        )
    except ValueError as exc:
        raise _value_error_to_http(exc) from exc
    return AccountRead.from_entity(account)


@router.post("/payment-receipts/{purchase_id}/{decision}", response_model=PurchaseRead)
async def decide_payment_receipt(
    purchase_id: str,
    decision: Literal["approve", "reject"],
    payload: ReviewDecision | None = None,
    db: Session = Depends(get_db),
    store: NotificationStore = Depends(get_notification_store),
    bus: NotificationEventBus = Depends(get_notification_bus),
    triggers: NotificationTriggers = Depends(get_notification_triggers),
    _: Account = Depends(require_admin),
) -> PurchaseRead:
    """Accept or refuse the bank transfer receipt of a pending purchase."""

    try:
        purchase = await review_payment_receipt(
            db,
            store,
            bus,
            triggers,
            purchase_id=purchase_id,
            approved=decision == "approve",
            reason=payload.reason if payload else None,
        )
    except ValueError as exc:
        raise _value_error_to_http(exc) from exc
    return PurchaseRead.from_entity(purchase)


@router.post("/offers/{offer_id}/{decision}", response_model=OfferRead)
async def decide_offer(
    offer_id: str,
    decision: Literal["approve", "reject"],
    payload: ReviewDecision | None = None,
    db: Session = Depends(get_db),
    _: Account = Depends(require_admin),
) -> OfferRead:
    try:
        offer = await review_offer(
            db,
            offer_id=offer_id,
            approved=decision == "approve",
            reason=payload.reason if payload else None,
        )
    except ValueError as exc:
        raise _value_error_to_http(exc) from exc
    return OfferRead.from_entity(offer)


@router.post("/accounts/{account_id}/verification/{decision}", response_model=AccountRead)
async def decide_verification(
    account_id: str,
    decision: Literal["approve", "reject"],
    payload: ReviewDecision | None = None,
    db: Session = Depends(get_db),
    store: NotificationStore = Depends(get_notification_store),
    bus: NotificationEventBus = Depends(get_notification_bus),
    _: Account = Depends(require_admin),
) -> AccountRead:
    try:
        account = await review_verification(
            db,
            store,
            bus,
            account_id=account_id,
            approved=decision == "approve",
            reason=payload.reason if payload else None,
        )
    except ValueError as exc:
        raise _value_error_to_http(exc) from exc
    return AccountRead.from_entity(account)
