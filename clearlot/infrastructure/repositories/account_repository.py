"""Persistence layer for account data."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from clearlot.domain.entities import Account
from clearlot.infrastructure.models import AccountModel
from clearlot.utils import ensure_app_naive_datetime, ensure_app_timezone


class AccountRepository:
    """Provide CRUD operations for account entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list(self, skip: int = 0, limit: int = 100) -> Sequence[Account]:
        query = (
            self.session.query(AccountModel)
            .order_by(AccountModel.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return [self._to_entity(model) for model in query.all()]

    def get(self, account_id: str) -> Account | None:
        model = self.session.get(AccountModel, account_id)
        return self._to_entity(model) if model else None

    def get_by_email(self, email: str) -> Account | None:
        model = (
            self.session.query(AccountModel)
            .filter(AccountModel.email == email.strip().lower())
            .first()
        )
        return self._to_entity(model) if model else None

    def get_map_by_ids(self, account_ids: Iterable[str]) -> dict[str, Account]:
        ids = {account_id for account_id in account_ids if account_id}
        if not ids:
            return {}
        models = self.session.query(AccountModel).filter(AccountModel.id.in_(ids)).all()
        return {model.id: self._to_entity(model) for model in models}

    def list_admins(self) -> Sequence[Account]:
        models = self.session.query(AccountModel).filter(AccountModel.is_admin.is_(True)).all()
        return [self._to_entity(model) for model in models]

    def list_ids_by_status(self, statuses: Iterable[str]) -> list[str]:
        rows = (
            self.session.query(AccountModel.id)
            .filter(AccountModel.status.in_(list(statuses)))
            .order_by(AccountModel.created_at)
            .all()
        )
        return [row[0] for row in rows]

    def list_with_verification_documents(self) -> Sequence[Account]:
        models = (
            self.session.query(AccountModel)
            .filter(AccountModel.verification_submitted_at.is_not(None))
            .order_by(AccountModel.verification_submitted_at.desc())
            .all()
        )
        return [self._to_entity(model) for model in models]

    def submit_verification_documents(
        self, account_id: str, documents: dict[str, Any], submitted_at: datetime
    ) -> Account:
        """Merge ``documents`` into the account and queue it for review."""

        model = self.session.get(AccountModel, account_id)
        if model is None:
            msg = f"Account with id {account_id} not found"
            raise ValueError(msg)
        model.verification_documents = {**(model.verification_documents or {}), **documents}
        model.verification_submitted_at = ensure_app_naive_datetime(submitted_at)
        model.verification_status = "pending"
        model.verification_notes = None
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def create(self, account: Account) -> Account:
        model = AccountModel(
            email=account.email.strip().lower(),
            password=account.password,
            company=account.company,
            name=account.name,
            phone=account.phone,
            is_admin=account.is_admin,
            status=account.status,
            verification_status=account.verification_status,
            verification_documents=account.verification_documents,
            verification_submitted_at=ensure_app_naive_datetime(
                account.verification_submitted_at
            ),
            verification_notes=account.verification_notes,
        )
        if account.id:
            model.id = account.id
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def update_status(
        self,
        account_id: str,
        *,
        status: str | None = None,
        verification_status: str | None = None,
        verification_notes: str | None = None,
    ) -> Account:
        model = self.session.get(AccountModel, account_id)
        if model is None:
            msg = f"Account with id {account_id} not found"
            raise ValueError(msg)
        if status is not None:
            model.status = status
        if verification_status is not None:
            model.verification_status = verification_status
        if verification_notes is not None:
            model.verification_notes = verification_notes
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: AccountModel) -> Account:
        return Account(
            id=model.id,
            email=model.email,
            password=model.password,
            company=model.company,
            name=model.name,
            phone=model.phone,
            is_admin=bool(model.is_admin),
            status=model.status,
            verification_status=model.verification_status,
            created_at=ensure_app_timezone(model.created_at),
            verification_documents=(
                dict(model.verification_documents) if model.verification_documents else None
            ),
            verification_submitted_at=ensure_app_timezone(model.verification_submitted_at),
            verification_notes=model.verification_notes,
        )


__all__ = ["AccountRepository"]
