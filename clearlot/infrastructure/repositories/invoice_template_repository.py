"""Persistence layer for invoice templates."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from clearlot.domain.entities import InvoiceSettings, InvoiceTemplate
from clearlot.infrastructure.models import InvoiceTemplateModel
from clearlot.utils import ensure_app_naive_datetime, ensure_app_timezone, now_in_app_timezone


class InvoiceTemplateRepository:
    """Provide CRUD operations for :class:`InvoiceTemplate` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list(self) -> Sequence[InvoiceTemplate]:
        models = (
            self.session.query(InvoiceTemplateModel)
            .order_by(InvoiceTemplateModel.created_at.asc())
            .all()
        )
        return [self._to_entity(model) for model in models]

    def get(self, template_id: str) -> InvoiceTemplate | None:
        model = self.session.get(InvoiceTemplateModel, template_id)
        return self._to_entity(model) if model else None

    def create(self, template: InvoiceTemplate) -> InvoiceTemplate:
        model = InvoiceTemplateModel(
            name=template.name,
            is_default=template.is_default,
            settings=template.settings.to_dict(),
        )
        if template.is_default:
            self._clear_default()
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def update(self, template: InvoiceTemplate) -> InvoiceTemplate:
        if template.id is None:
            raise ValueError("Invoice template id is required for updates")
        model = self.session.get(InvoiceTemplateModel, template.id)
        if model is None:
            msg = f"Invoice template with id {template.id} not found"
            raise ValueError(msg)
        if template.is_default and not model.is_default:
            self._clear_default()
        model.name = template.name
        model.is_default = template.is_default
        model.settings = template.settings.to_dict()
        model.updated_at = ensure_app_naive_datetime(now_in_app_timezone())
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def delete(self, template_id: str) -> None:
        model = self.session.get(InvoiceTemplateModel, template_id)
        if model is None:
            msg = f"Invoice template with id {template_id} not found"
            raise ValueError(msg)
        self.session.delete(model)
        self.session.commit()

    def _clear_default(self) -> None:
        self.session.query(InvoiceTemplateModel).filter(
            InvoiceTemplateModel.is_default.is_(True)
        ).update({InvoiceTemplateModel.is_default: False}, synchronize_session=False)

    @staticmethod
    def _to_entity(model: InvoiceTemplateModel) -> InvoiceTemplate:
        return InvoiceTemplate(
            id=model.id,
            name=model.name,
            is_default=bool(model.is_default),
            settings=InvoiceSettings.from_dict(model.settings),
            created_at=ensure_app_timezone(model.created_at),
            updated_at=ensure_app_timezone(model.updated_at),
        )


__all__ = ["InvoiceTemplateRepository"]
