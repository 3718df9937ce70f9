"""Send an announcement to every active account."""

from __future__ import annotations

import logging

import anyio
from sqlalchemy.orm import Session

from clearlot.infrastructure.notifications import NotificationTriggers
from clearlot.infrastructure.repositories import AccountRepository

logger = logging.getLogger(__name__)

BROADCAST_STATUSES = ("active",)


async def broadcast_system_message(
    session: Session,
    triggers: NotificationTriggers,
    *,
    title: str,
    message: str,
) -> int:
    """Raise a system notification for each active account and return how many."""

    title = title.strip()
    message = message.strip()
    if not title or not message:
        raise ValueError("Title and message are required")

    recipients = await anyio.to_thread.run_sync(
        AccountRepository(session).list_ids_by_status, BROADCAST_STATUSES
    )
    sent = 0
    for user_id in recipients:
        if await triggers.system_message(user_id, title, message) is not None:
            sent += 1
    logger.info("System message %r sent to %s of %s accounts", title, sent, len(recipients))
    return sent
