"""Endpoints and websocket handler for realtime notifications."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

import anyio
from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    WebSocket,
    WebSocketDisconnect,
    status,
)

from clearlot.application.use_cases.accounts.authenticate import BLOCKED_ACCOUNT_STATUSES
from clearlot.application.use_cases.notifications import (
    DeliveryReminderWatcher,
    NotificationAggregator,
    OrderStatusWatcher,
    PriceWatcher,
)
from clearlot.config import get_settings
from clearlot.domain.entities import Account, Notification
from clearlot.infrastructure.database import SessionLocal
from clearlot.infrastructure.notifications import (
    NotificationNotFoundError,
    NotificationStore,
    NotificationStoreError,
    WebsocketDesktopNotifier,
    serialize_notifications,
)
from clearlot.interfaces.api.dependencies import (
    get_current_active_account,
    get_notification_store,
    resolve_current_account,
)
from clearlot.interfaces.api.schemas import (
    CleanupResponse,
    NotificationRead,
    UnreadCountResponse,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)

_STORE_UNAVAILABLE = "Notification store is unavailable"


def _store_unavailable(exc: NotificationStoreError) -> HTTPException:
    logger.warning("Notification store error: %s", exc)
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=_STORE_UNAVAILABLE
    )


async def _get_owned_notification(
    store: NotificationStore, notification_id: str, account: Account
) -> Notification:
    try:
        notification = await store.get_notification(notification_id)
    except NotificationStoreError as exc:
        raise _store_unavailable(exc) from exc
    if notification is None or notification.user_id != account.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found"
        )
    return notification


@router.get("/", response_model=list[NotificationRead])
async def list_notifications(
    limit: int | None = Query(default=None, ge=1, le=500),
    store: NotificationStore = Depends(get_notification_store),
    current_account: Account = Depends(get_current_active_account),
) -> list[NotificationRead]:
    """Return the most recent notifications for the authenticated account."""

    try:
        notifications = await store.get_notifications(current_account.id, limit)
    except NotificationStoreError as exc:
        raise _store_unavailable(exc) from exc
    return [NotificationRead.from_entity(notification) for notification in notifications]


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    store: NotificationStore = Depends(get_notification_store),
    current_account: Account = Depends(get_current_active_account),
) -> UnreadCountResponse:
    try:
        count = await store.get_unread_count(current_account.id)
    except NotificationStoreError as exc:
        raise _store_unavailable(exc) from exc
    return UnreadCountResponse(unread_count=count)


@router.post("/read-all", status_code=status.HTTP_204_NO_CONTENT)
async def mark_all_notifications_read(
    store: NotificationStore = Depends(get_notification_store),
    current_account: Account = Depends(get_current_active_account),
) -> None:
    try:
        await store.mark_all_as_read(current_account.id)
    except NotificationStoreError as exc:
        raise _store_unavailable(exc) from exc


@router.post("/cleanup", response_model=CleanupResponse)
async def cleanup_notifications(
    days_old: int = Query(default=30, ge=0),
    store: NotificationStore = Depends(get_notification_store),
    current_account: Account = Depends(get_current_active_account),
) -> CleanupResponse:
    """Delete the account's notifications older than ``days_old`` days."""

    try:
        removed = await store.cleanup_old_notifications(current_account.id, days_old)
    except NotificationStoreError as exc:
        raise _store_unavailable(exc) from exc
    return CleanupResponse(removed=removed)


@router.post("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_notification_read(
    notification_id: str,
    store: NotificationStore = Depends(get_notification_store),
    current_account: Account = Depends(get_current_active_account),
) -> None:
    await _get_owned_notification(store, notification_id, current_account)
    try:
        await store.mark_as_read(notification_id)
    except NotificationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except NotificationStoreError as exc:
        raise _store_unavailable(exc) from exc


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: str,
    store: NotificationStore = Depends(get_notification_store),
    current_account: Account = Depends(get_current_active_account),
) -> None:
    await _get_owned_notification(store, notification_id, current_account)
    try:
        await store.delete_notification(notification_id)
    except NotificationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except NotificationStoreError as exc:
        raise _store_unavailable(exc) from exc


@router.delete("/", status_code=status.HTTP_204_NO_CONTENT)
async def delete_all_notifications(
    store: NotificationStore = Depends(get_notification_store),
    current_account: Account = Depends(get_current_active_account),
) -> None:
    try:
        await store.delete_all_notifications(current_account.id)
    except NotificationStoreError as exc:
        raise _store_unavailable(exc) from exc


def _notifications_message(
    message_type: str, notifications: list[Notification]
) -> dict[str, Any]:
    return {
        "type": message_type,
        "data": serialize_notifications(notifications),
        "unread_count": sum(1 for item in notifications if not item.is_read),
    }


def _authenticate_websocket(token: str) -> Account:
    session = SessionLocal()
    try:
        account = resolve_current_account(token, session)
    finally:
        session.close()
    if account.status in BLOCKED_ACCOUNT_STATUSES:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is not active")
    return account


async def _handle_client_message(
    websocket: WebSocket,
    aggregator: NotificationAggregator,
    desktop: WebsocketDesktopNotifier,
    message: dict[str, Any],
) -> None:
    message_type = message.get("type")

    if message_type == "ping":
        await websocket.send_json({"type": "pong"})
        return

    if message_type in {"mark_read", "delete"}:
        notification_id = message.get("id")
        if not isinstance(notification_id, str) or not any(
            item.id == notification_id for item in aggregator.notifications
        ):
            await websocket.send_json(
                {"type": "error", "detail": "Notification not found"}
            )
            return
        if message_type == "mark_read":
            ok = await aggregator.mark_as_read(notification_id)
        else:
            ok = await aggregator.delete_notification(notification_id)
        await websocket.send_json({"type": "ack", "action": message_type, "ok": ok})
        return

    if message_type == "mark_all_read":
        ok = await aggregator.mark_all_as_read()
        await websocket.send_json({"type": "ack", "action": message_type, "ok": ok})
        return

    if message_type == "clear_all":
        ok = await aggregator.clear_all_notifications()
        await websocket.send_json({"type": "ack", "action": message_type, "ok": ok})
        return

    if message_type == "desktop_permission":
        desktop.granted = message.get("granted") is True
        return

    if message_type == "diagnostics":
        report = await aggregator.run_diagnostics()
        await websocket.send_json({"type": "diagnostics", "data": report})


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams the aggregated list to the account."""

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=1008)
        return

    try:
        account = await anyio.to_thread.run_sync(_authenticate_websocket, token)
    except HTTPException:
        await websocket.close(code=1008)
        return
    except Exception:  # pragma: no cover - database unavailable
        logger.exception("Websocket authentication failed")
        await websocket.close(code=1011)
        return

    state = websocket.app.state
    settings = get_settings()
    store: NotificationStore = state.notification_store
    desktop = WebsocketDesktopNotifier(
        state.notification_publisher,
        account.id,
        websocket,
        enabled=settings.desktop_notifications_enabled,
        granted=websocket.query_params.get("desktop") == "granted",
    )
    aggregator = NotificationAggregator(
        account.id,
        store,
        state.notification_bus,
        desktop_notifier=desktop,
        watchers=(
            OrderStatusWatcher(account.id, SessionLocal, store, state.notification_bus),
            PriceWatcher(
                account.id,
                SessionLocal,
                store,
                state.notification_bus,
                threshold=settings.price_drop_threshold,
            ),
            DeliveryReminderWatcher(
                account.id,
                SessionLocal,
                store,
                state.notification_bus,
                reminder_interval=timedelta(minutes=settings.delivery_reminder_interval_minutes),
                escalate_after=timedelta(hours=settings.delivery_escalation_hours),
                check_interval=settings.delivery_reminder_check_seconds,
            ),
        ),
        dedup_window=timedelta(seconds=settings.notification_dedup_window_seconds),
    )
    manager = state.notification_manager

    send_stream, receive_stream = anyio.create_memory_object_stream(100)

    def _on_change(notifications: list[Notification]) -> None:
        try:
            send_stream.send_nowait(notifications)
        except anyio.WouldBlock:
            logger.warning("Dropping notification update for slow socket of %s", account.id)
        except (anyio.BrokenResourceError, anyio.ClosedResourceError):
            pass

    await manager.connect(account.id, websocket)
    release_listener = None
    try:
        await aggregator.start()
        release_listener = aggregator.on_change(_on_change)
        await websocket.send_json(
            _notifications_message("init", aggregator.notifications)
        )

        async def _forward_updates() -> None:
            async with receive_stream:
                async for notifications in receive_stream:
                    try:
                        await websocket.send_json(
                            _notifications_message("notifications", notifications)
                        )
                    except (WebSocketDisconnect, RuntimeError):
                        logger.debug("Notification socket closed for %s", account.id)
                        return

        async with anyio.create_task_group() as task_group:
            task_group.start_soon(_forward_updates)
            while True:
                try:
                    message = await websocket.receive_json()
                except WebSocketDisconnect:
                    break
                except ValueError:
                    await websocket.send_json({"type": "error", "detail": "Invalid message"})
                    continue
                if isinstance(message, dict):
                    await _handle_client_message(websocket, aggregator, desktop, message)
            task_group.cancel_scope.cancel()
    finally:
        if release_listener is not None:
            release_listener()
        send_stream.close()
        await aggregator.stop()
        manager.disconnect(account.id, websocket)
