"""Administrator notification area: review queue and announcements."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from clearlot.application.use_cases.admin import broadcast_system_message, load_admin_feed
from clearlot.config import get_settings
from clearlot.domain.entities import Account
from clearlot.infrastructure.database import get_db
from clearlot.infrastructure.notifications import (
    NotificationStore,
    NotificationStoreError,
    NotificationTriggers,
)
from clearlot.interfaces.api.dependencies import (
    get_notification_store,
    get_notification_triggers,
    require_admin,
)
from clearlot.interfaces.api.schemas import (
    AdminFeedRead,
    BroadcastResponse,
    SystemMessageCreate,
)

router = APIRouter(prefix="/admin/notifications", tags=["admin"])


@router.get("/feed", response_model=AdminFeedRead)
async def get_admin_feed(
    db: Session = Depends(get_db),
    store: NotificationStore = Depends(get_notification_store),
    current_admin: Account = Depends(require_admin),
) -> AdminFeedRead:
    """Return pending receipts, offers and verification documents."""

    try:
        feed = await load_admin_feed(
            db, store, current_admin.id, limit=get_settings().admin_feed_limit
        )
    except NotificationStoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notification store is unavailable",
        ) from exc
    return AdminFeedRead.from_entity(feed)


@router.post("/system", response_model=BroadcastResponse)
async def send_system_message(
    payload: SystemMessageCreate,
    db: Session = Depends(get_db),
    triggers: NotificationTriggers = Depends(get_notification_triggers),
    _: Account = Depends(require_admin),
) -> BroadcastResponse:
    """Announce a system message to every active account."""

    try:
        recipients = await broadcast_system_message(
            db, triggers, title=payload.title, message=payload.message
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return BroadcastResponse(recipients=recipients)
