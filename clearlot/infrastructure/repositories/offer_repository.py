"""Persistence layer for offers."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy.orm import Session

from clearlot.domain.entities import OFFER_STATUS_ACTIVE, OFFER_STATUS_SOLD, Offer
from clearlot.infrastructure.models import OfferModel
from clearlot.utils import ensure_app_timezone


class OfferRepository:
    """Provide CRUD operations for :class:`Offer` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, offer_id: str) -> Offer | None:
        model = self.session.get(OfferModel, offer_id)
        return self._to_entity(model) if model else None

    def create(self, offer: Offer) -> Offer:
        model = OfferModel(
            offer_code=offer.offer_code,
            title=offer.title,
            description=offer.description,
            category=offer.category,
            location=offer.location,
            supplier_id=offer.supplier_id,
            original_price=offer.original_price,
            current_price=offer.current_price,
            previous_price=offer.previous_price,
            quantity=offer.quantity,
            unit=offer.unit,
            status=offer.status,
            rejection_reason=offer.rejection_reason,
        )
        if offer.id:
            model.id = offer.id
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def update_prices(
        self,
        offer_id: str,
        *,
        current_price: float | None = None,
        previous_price: float | None = None,
    ) -> Offer:
        model = self.session.get(OfferModel, offer_id)
        if model is None:
            msg = f"Offer with id {offer_id} not found"
            raise ValueError(msg)
        if current_price is not None:
            model.current_price = current_price
        if previous_price is not None:
            model.previous_price = previous_price
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def list_by_ids(self, offer_ids: Iterable[str]) -> Sequence[Offer]:
        ids = {offer_id for offer_id in offer_ids if offer_id}
        if not ids:
            return []
        models = self.session.query(OfferModel).filter(OfferModel.id.in_(ids)).all()
        return [self._to_entity(model) for model in models]

    def list_by_status(self, status: str, *, limit: int | None = None) -> Sequence[Offer]:
        query = (
            self.session.query(OfferModel)
            .filter(OfferModel.status == status)
            .order_by(OfferModel.created_at.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def review(
        self, offer_id: str, status: str, *, rejection_reason: str | None = None
    ) -> Offer:
        model = self.session.get(OfferModel, offer_id)
        if model is None:
            msg = f"Offer with id {offer_id} not found"
            raise ValueError(msg)
        model.status = status
        model.rejection_reason = rejection_reason
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def reserve_quantity(self, offer_id: str, quantity: int) -> Offer | None:
        """Take ``quantity`` units off an active offer, or return ``None``.

        An offer whose stock reaches zero is marked as sold.
        """

        updated = (
            self.session.query(OfferModel)
            .filter(OfferModel.id == offer_id)
            .filter(OfferModel.status == OFFER_STATUS_ACTIVE)
            .filter(OfferModel.quantity >= quantity)
            .update(
                {OfferModel.quantity: OfferModel.quantity - quantity},
                synchronize_session=False,
            )
        )
        if not updated:
            self.session.rollback()
            return None
        (
            self.session.query(OfferModel)
            .filter(OfferModel.id == offer_id)
            .filter(OfferModel.quantity <= 0)
            .update({OfferModel.status: OFFER_STATUS_SOLD}, synchronize_session=False)
        )
        self.session.commit()
        model = self.session.get(OfferModel, offer_id, populate_existing=True)
        return self._to_entity(model) if model else None

    def claim_price_drop(
        self, offer_id: str, expected_previous: float, new_previous: float
    ) -> bool:
        """Move ``previous_price`` forward unless another caller already did."""

        updated = (
            self.session.query(OfferModel)
            .filter(OfferModel.id == offer_id)
            .filter(OfferModel.previous_price == expected_previous)
            .update({OfferModel.previous_price: new_previous}, synchronize_session=False)
        )
        self.session.commit()
        return bool(updated)

    @staticmethod
    def _to_entity(model: OfferModel) -> Offer:
        return Offer(
            id=model.id,
            offer_code=model.offer_code,
            title=model.title,
            description=model.description or "",
            category=model.category or "",
            location=model.location or "",
            supplier_id=model.supplier_id,
            original_price=model.original_price,
            current_price=model.current_price,
            previous_price=model.previous_price,
            quantity=model.quantity,
            unit=model.unit,
            status=model.status,
            created_at=ensure_app_timezone(model.created_at),
            rejection_reason=model.rejection_reason,
        )


__all__ = ["OfferRepository"]
