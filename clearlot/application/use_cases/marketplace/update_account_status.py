"""Use cases for the administrative account status changes."""

from __future__ import annotations

import anyio
from sqlalchemy.orm import Session

from clearlot.application.use_cases.notifications import (
    notify_account_status_changed,
    notify_verification_status_changed,
)
from clearlot.domain.entities import ACCOUNT_STATUSES, VERIFICATION_STATUSES, Account
from clearlot.infrastructure.notifications import NotificationEventBus, NotificationStore
from clearlot.infrastructure.repositories import AccountRepository


async def update_account_status(
    session: Session,
    store: NotificationStore,
    bus: NotificationEventBus,
    *,
    account_id: str,
    status: str,
) -> Account:
    """Change the account status and notify its owner when it differs."""

    if status not in ACCOUNT_STATUSES:
        raise ValueError(f"Unknown account status: {status}")

    def _update():
        repository = AccountRepository(session)
        current = repository.get(account_id)
        if current is None:
            raise ValueError(f"Account with id {account_id} not found")
        return current.status, repository.update_status(account_id, status=status)

    previous, account = await anyio.to_thread.run_sync(_update)
    if previous != status:
        await notify_account_status_changed(store, bus, account)
    return account


async def update_verification_status(
    session: Session,
    store: NotificationStore,
    bus: NotificationEventBus,
    *,
    account_id: str,
    verification_status: str,
) -> Account:
    """Change the company verification status and notify the account owner."""

    if verification_status not in VERIFICATION_STATUSES:
        raise ValueError(f"Unknown verification status: {verification_status}")

    def _update():
        repository = AccountRepository(session)
        current = repository.get(account_id)
        if current is None:
            raise ValueError(f"Account with id {account_id} not found")
        updated = repository.update_status(
            account_id, verification_status=verification_status
        )
        return current.verification_status, updated

    previous, account = await anyio.to_thread.run_sync(_update)
    if previous != verification_status:
        await notify_verification_status_changed(store, bus, account)
    return account
