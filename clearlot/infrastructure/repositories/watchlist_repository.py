"""Persistence layer for watchlist entries."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from clearlot.domain.entities import WatchlistEntry
from clearlot.infrastructure.models import WatchlistModel
from clearlot.utils import ensure_app_timezone


class WatchlistRepository:
    """Provide access to the offers followed by each user."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: str, offer_id: str) -> WatchlistEntry | None:
        model = (
            self.session.query(WatchlistModel)
            .filter(WatchlistModel.user_id == user_id)
            .filter(WatchlistModel.offer_id == offer_id)
            .first()
        )
        return self._to_entity(model) if model else None

    def add(self, user_id: str, offer_id: str) -> WatchlistEntry:
        existing = self.get(user_id, offer_id)
        if existing is not None:
            return existing
        model = WatchlistModel(user_id=user_id, offer_id=offer_id)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def list_user_ids_for_offer(self, offer_id: str) -> list[str]:
        rows = (
            self.session.query(WatchlistModel.user_id)
            .filter(WatchlistModel.offer_id == offer_id)
            .all()
        )
        return [row[0] for row in rows]

    def list_for_user(self, user_id: str) -> Sequence[WatchlistEntry]:
        models = (
            self.session.query(WatchlistModel)
            .filter(WatchlistModel.user_id == user_id)
            .all()
        )
        return [self._to_entity(model) for model in models]

    @staticmethod
    def _to_entity(model: WatchlistModel) -> WatchlistEntry:
        return WatchlistEntry(
            id=model.id,
            user_id=model.user_id,
            offer_id=model.offer_id,
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["WatchlistRepository"]
