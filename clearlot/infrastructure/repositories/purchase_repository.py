"""Persistence layer for purchases."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from clearlot.domain.entities import PURCHASE_STATUS_SHIPPED, Purchase
from clearlot.infrastructure.models import PurchaseModel
from clearlot.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_naive_datetime,
)


class PurchaseRepository:
    """Provide CRUD operations for :class:`Purchase` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_all(self, *, limit: int | None = None) -> Sequence[Purchase]:
        query = self.session.query(PurchaseModel).order_by(
            PurchaseModel.purchase_date.desc()
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def list_for_user(self, user_id: str) -> Sequence[Purchase]:
        query = (
            self.session.query(PurchaseModel)
            .filter(
                (PurchaseModel.buyer_id == user_id) | (PurchaseModel.seller_id == user_id)
            )
            .order_by(PurchaseModel.purchase_date.desc())
        )
        return [self._to_entity(model) for model in query.all()]

    def list_by_status(self, status: str, *, limit: int | None = None) -> Sequence[Purchase]:
        query = (
            self.session.query(PurchaseModel)
            .filter(PurchaseModel.status == status)
            .order_by(PurchaseModel.purchase_date.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def get(self, purchase_id: str) -> Purchase | None:
        model = self.session.get(PurchaseModel, purchase_id)
        return self._to_entity(model) if model else None

    def create(self, purchase: Purchase) -> Purchase:
        model = PurchaseModel(
            offer_id=purchase.offer_id,
            buyer_id=purchase.buyer_id,
            seller_id=purchase.seller_id,
            quantity=purchase.quantity,
            unit_price=purchase.unit_price,
            total_amount=purchase.total_amount,
            platform_fee=purchase.platform_fee,
            final_amount=purchase.final_amount,
            status=purchase.status,
            previous_status=purchase.previous_status,
            payment_method=purchase.payment_method,
            payment_details=purchase.payment_details,
            delivery_details=purchase.delivery_details,
            shipped_at=ensure_app_naive_datetime(purchase.shipped_at),
            reminder_count=purchase.reminder_count,
            last_reminder_at=ensure_app_naive_datetime(purchase.last_reminder_at),
            admin_notified=purchase.admin_notified,
        )
        if purchase.id:
            model.id = purchase.id
        if purchase.purchase_date is not None:
            model.purchase_date = ensure_app_naive_datetime(purchase.purchase_date)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def update_status(self, purchase_id: str, status: str) -> tuple[Purchase, str]:
        """Set ``status`` and return the updated purchase with its previous status.

        Entering ``shipped`` starts a fresh delivery reminder cycle.
        """

        model = self.session.get(PurchaseModel, purchase_id)
        if model is None:
            msg = f"Purchase with id {purchase_id} not found"
            raise ValueError(msg)
        previous_status = model.status
        model.previous_status = previous_status
        model.status = status
        if status == PURCHASE_STATUS_SHIPPED and previous_status != status:
            model.shipped_at = now_in_app_naive_datetime()
            model.reminder_count = 0
            model.last_reminder_at = None
            model.admin_notified = False
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model), previous_status

    def update_payment_details(self, purchase_id: str, changes: dict[str, Any]) -> Purchase:
        """Merge ``changes`` into the stored payment details."""

        model = self.session.get(PurchaseModel, purchase_id)
        if model is None:
            msg = f"Purchase with id {purchase_id} not found"
            raise ValueError(msg)
        model.payment_details = {**(model.payment_details or {}), **changes}
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def acknowledge_status(self, purchase_id: str, expected_previous: str | None) -> bool:
        """Record the current status as notified when nobody else did first."""

        query = self.session.query(PurchaseModel).filter(PurchaseModel.id == purchase_id)
        if expected_previous is None:
            query = query.filter(PurchaseModel.previous_status.is_(None))
        else:
            query = query.filter(PurchaseModel.previous_status == expected_previous)
        updated = query.update(
            {PurchaseModel.previous_status: PurchaseModel.status},
            synchronize_session=False,
        )
        self.session.commit()
        return bool(updated)

    def claim_reminder(self, purchase_id: str, expected_count: int, sent_at: datetime) -> bool:
        """Count a delivery reminder unless another sweep already sent it."""

        updated = (
            self.session.query(PurchaseModel)
            .filter(PurchaseModel.id == purchase_id)
            .filter(PurchaseModel.status == PURCHASE_STATUS_SHIPPED)
            .filter(PurchaseModel.reminder_count == expected_count)
            .update(
                {
                    PurchaseModel.reminder_count: expected_count + 1,
                    PurchaseModel.last_reminder_at: ensure_app_naive_datetime(sent_at),
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return bool(updated)

    def claim_admin_escalation(self, purchase_id: str) -> bool:
        updated = (
            self.session.query(PurchaseModel)
            .filter(PurchaseModel.id == purchase_id)
            .filter(PurchaseModel.admin_notified.is_(False))
            .update({PurchaseModel.admin_notified: True}, synchronize_session=False)
        )
        self.session.commit()
        return bool(updated)

    @staticmethod
    def _to_entity(model: PurchaseModel) -> Purchase:
        return Purchase(
            id=model.id,
            offer_id=model.offer_id,
            buyer_id=model.buyer_id,
            seller_id=model.seller_id,
            quantity=model.quantity,
            unit_price=model.unit_price,
            total_amount=model.total_amount,
            platform_fee=model.platform_fee,
            final_amount=model.final_amount,
            status=model.status,
            previous_status=model.previous_status,
            purchase_date=ensure_app_timezone(model.purchase_date),
            payment_method=model.payment_method,
            payment_details=dict(model.payment_details) if model.payment_details else None,
            delivery_details=dict(model.delivery_details) if model.delivery_details else None,
            shipped_at=ensure_app_timezone(model.shipped_at),
            reminder_count=model.reminder_count or 0,
            last_reminder_at=ensure_app_timezone(model.last_reminder_at),
            admin_notified=bool(model.admin_notified),
        )


__all__ = ["PurchaseRepository"]
