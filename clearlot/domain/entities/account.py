"""Domain entity representing a marketplace account."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Final

ACCOUNT_STATUSES: Final[tuple[str, ...]] = (
    "active",
    "inactive",
    "suspended",
    "pending",
    "pending_verification",
)

VERIFICATION_STATUSES: Final[tuple[str, ...]] = (
    "approved",
    "rejected",
    "pending",
    "not_submitted",
)

VERIFICATION_DOCUMENT_TYPES: Final[tuple[str, ...]] = (
    "businessRegistration",
    "companyRegistration",
    "businessLicense",
    "taxCertificate",
    "bankStatement",
)


@dataclass
class Account:
    """Company account that can both buy and sell on the marketplace."""

    id: str | None
    email: str
    password: str
    company: str
    name: str | None = None
    phone: str | None = None
    is_admin: bool = False
    status: str = "active"
    verification_status: str = "not_submitted"
    created_at: datetime | None = None
    verification_documents: dict[str, Any] | None = None
    verification_submitted_at: datetime | None = None
    verification_notes: str | None = None

    @property
    def display_name(self) -> str:
        return self.company or self.name or self.email


__all__ = [
    "ACCOUNT_STATUSES",
    "VERIFICATION_DOCUMENT_TYPES",
    "VERIFICATION_STATUSES",
    "Account",
]
