"""Use case for uploading company verification documents."""

from __future__ import annotations

from collections.abc import Mapping

import anyio
from sqlalchemy.orm import Session

from clearlot.application.use_cases.notifications import notify_verification_status_changed
from clearlot.domain.entities import VERIFICATION_DOCUMENT_TYPES, Account
from clearlot.infrastructure.notifications import NotificationEventBus, NotificationStore
from clearlot.infrastructure.repositories import AccountRepository
from clearlot.utils import now_in_app_timezone


async def submit_verification_documents(
    session: Session,
    store: NotificationStore,
    bus: NotificationEventBus,
    *,
    account_id: str,
    documents: Mapping[str, str],
) -> Account:
    """Attach document URLs to the account and queue it for verification.

    Raises:
        ValueError: If no document is given, a type is unknown or a URL is blank.
    """

    if not documents:
        raise ValueError("At least one verification document is required")
    cleaned: dict[str, str] = {}
    for document_type, url in documents.items():
        if document_type not in VERIFICATION_DOCUMENT_TYPES:
            raise ValueError(f"Unknown verification document type: {document_type}")
        if not url or not url.strip():
            raise ValueError(f"Missing URL for {document_type}")
        cleaned[document_type] = url.strip()

    def _submit():
        repository = AccountRepository(session)
        current = repository.get(account_id)
        if current is None:
            raise ValueError(f"Account with id {account_id} not found")
        updated = repository.submit_verification_documents(
            account_id, cleaned, now_in_app_timezone()
        )
        return current.verification_status, updated

    previous, account = await anyio.to_thread.run_sync(_submit)
    if previous != account.verification_status:
        await notify_verification_status_changed(store, bus, account)
    return account
