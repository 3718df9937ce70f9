"""Schemas for invoice templates and the admin purchase listing."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from clearlot.domain.entities import (
    EnrichedPurchase,
    InvoiceCompany,
    InvoiceHeader,
    InvoiceSections,
    InvoiceSettings,
    InvoiceStyling,
    InvoiceTemplate,
)

HEX_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InvoiceHeaderSchema(_CamelModel):
    title: str = Field(default=InvoiceHeader.title, min_length=1, max_length=120)
    subtitle: str = Field(default=InvoiceHeader.subtitle, max_length=120)
    logo_url: str | None = None
    show_logo: bool = True


class InvoiceCompanySchema(_CamelModel):
    name: str = Field(default=InvoiceCompany.name, max_length=200)
    address: str = Field(default=InvoiceCompany.address, max_length=300)
    phone: str = Field(default=InvoiceCompany.phone, max_length=40)
    email: str = Field(default=InvoiceCompany.email, max_length=255)
    show_company_info: bool = True


class InvoiceStylingSchema(_CamelModel):
    primary_color: str = Field(default=InvoiceStyling.primary_color, pattern=HEX_COLOR_PATTERN)
    secondary_color: str = Field(
        default=InvoiceStyling.secondary_color, pattern=HEX_COLOR_PATTERN
    )
    font_family: str = Field(default=InvoiceStyling.font_family, min_length=1, max_length=60)
    font_size: int = Field(default=InvoiceStyling.font_size, ge=8, le=24)


class InvoiceSectionsSchema(_CamelModel):
    show_buyer_info: bool = True
    show_seller_info: bool = True
    show_product_table: bool = True
    show_payment_info: bool = True
    show_delivery_info: bool = True
    show_footer: bool = True
    footer_text: str = Field(default="", max_length=500)


class InvoiceSettingsSchema(_CamelModel):
    header: InvoiceHeaderSchema = Field(default_factory=InvoiceHeaderSchema)
    company: InvoiceCompanySchema = Field(default_factory=InvoiceCompanySchema)
    styling: InvoiceStylingSchema = Field(default_factory=InvoiceStylingSchema)
    sections: InvoiceSectionsSchema = Field(default_factory=InvoiceSectionsSchema)

    def to_entity(self) -> InvoiceSettings:
        return InvoiceSettings(
            header=InvoiceHeader(**self.header.model_dump()),
            company=InvoiceCompany(**self.company.model_dump()),
            styling=InvoiceStyling(**self.styling.model_dump()),
            sections=InvoiceSections(**self.sections.model_dump()),
        )

    @classmethod
    def from_entity(cls, settings: InvoiceSettings) -> "InvoiceSettingsSchema":
        return cls.model_validate(settings.to_dict())


class InvoiceTemplateCreate(_CamelModel):
    name: str = Field(..., min_length=1, max_length=120)
    is_default: bool = False
    settings: InvoiceSettingsSchema = Field(default_factory=InvoiceSettingsSchema)


class InvoiceTemplateUpdate(_CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    is_default: bool | None = None
    settings: InvoiceSettingsSchema | None = None


class InvoiceTemplateRead(_CamelModel):
    id: str
    name: str
    is_default: bool
    settings: InvoiceSettingsSchema
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_entity(cls, template: InvoiceTemplate) -> "InvoiceTemplateRead":
        return cls(
            id=template.id or "",
            name=template.name,
            is_default=template.is_default,
            settings=InvoiceSettingsSchema.from_entity(template.settings),
            created_at=template.created_at,
            updated_at=template.updated_at,
        )


class PartySummary(_CamelModel):
    id: str
    company: str
    name: str | None = None
    email: str
    phone: str | None = None


class OfferSummary(_CamelModel):
    id: str
    offer_code: str
    title: str
    unit: str


class EnrichedPurchaseRead(_CamelModel):
    id: str
    offer_id: str
    buyer_id: str
    seller_id: str
    quantity: int
    unit_price: float
    total_amount: float
    platform_fee: float
    final_amount: float
    status: str
    purchase_date: datetime | None = None
    payment_details: dict[str, Any] | None = None
    delivery_details: dict[str, Any] | None = None
    offer: OfferSummary | None = None
    buyer: PartySummary | None = None
    seller: PartySummary | None = None

    @classmethod
    def from_entity(cls, enriched: EnrichedPurchase) -> "EnrichedPurchaseRead":
        purchase = enriched.purchase

        def _party(account):
            if account is None:
                return None
            return PartySummary(
                id=account.id,
                company=account.company,
                name=account.name,
                email=account.email,
                phone=account.phone,
            )

        offer = enriched.offer
        return cls(
            id=purchase.id,
            offer_id=purchase.offer_id,
            buyer_id=purchase.buyer_id,
            seller_id=purchase.seller_id,
            quantity=purchase.quantity,
            unit_price=purchase.unit_price,
            total_amount=purchase.total_amount,
            platform_fee=purchase.platform_fee,
            final_amount=purchase.final_amount,
            status=purchase.status,
            purchase_date=purchase.purchase_date,
            payment_details=purchase.payment_details,
            delivery_details=purchase.delivery_details,
            offer=OfferSummary(
                id=offer.id, offer_code=offer.offer_code, title=offer.title, unit=offer.unit
            )
            if offer is not None
            else None,
            buyer=_party(enriched.buyer),
            seller=_party(enriched.seller),
        )


__all__ = [
    "EnrichedPurchaseRead",
    "InvoiceCompanySchema",
    "InvoiceHeaderSchema",
    "InvoiceSectionsSchema",
    "InvoiceSettingsSchema",
    "InvoiceStylingSchema",
    "InvoiceTemplateCreate",
    "InvoiceTemplateRead",
    "InvoiceTemplateUpdate",
    "OfferSummary",
    "PartySummary",
]
