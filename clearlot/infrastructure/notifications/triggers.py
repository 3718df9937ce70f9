"""Builders for the notifications raised across the marketplace.

Every ``build_*`` function returns a bare :class:`Notification` payload (no id,
no timestamp). :class:`NotificationTriggers` raises the payloads produced by
user actions.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime

from clearlot.domain.entities import Notification

from .event_bus import NotificationEventBus
from .store import NotificationStore, NotificationStoreError

logger = logging.getLogger(__name__)

_ORDER_STATUS_MESSAGES = {
    "pending": "您的訂單正在等待付款審核",
    "approved": "您的付款已獲批准！",
    "shipped": "您的訂單已發貨！",
    "delivered": "您的訂單已送達！",
    "completed": "您的訂單已完成！",
}
_ORDER_STATUS_EMOJIS = {
    "pending": "⏳",
    "approved": "✅",
    "shipped": "📦",
    "delivered": "🎯",
    "completed": "🎉",
}

_ACCOUNT_STATUS_MESSAGES = {
    "active": "您的帳戶已激活，現在可以正常使用所有功能。",
    "inactive": "您的帳戶已被停用，請聯繫管理員了解詳情。",
    "suspended": "您的帳戶已被暫停，請聯繫管理員了解詳情。",
    "pending": "您的帳戶正在等待審核，請耐心等待。",
}
_ACCOUNT_STATUS_EMOJIS = {
    "active": "✅",
    "inactive": "❌",
    "suspended": "⚠️",
    "pending": "⏳",
}

_VERIFICATION_STATUS_MESSAGES = {
    "approved": "恭喜！您的公司認證已獲批准，現在可以享受認證賣家的所有權益。",
    "rejected": "您的公司認證申請被拒絕，請檢查文件並重新提交。",
    "pending": "您的公司認證申請正在審核中，請耐心等待。",
    "not_submitted": "請提交公司認證文件以獲得認證賣家權益。",
}
_VERIFICATION_STATUS_EMOJIS = {
    "approved": "🎉",
    "rejected": "❌",
    "pending": "⏳",
    "not_submitted": "📝",
}

_SALES_STATUS_MESSAGES = {
    "pending": "新訂單：{buyer} 已購買 \"{title}\"，等待付款審核。",
    "approved": "付款已獲批准：{buyer} 的訂單 \"{title}\" 已確認付款。",
    "shipped": "訂單已發貨：{buyer} 的訂單 \"{title}\" 已發貨。",
    "delivered": "訂單已送達：{buyer} 的訂單 \"{title}\" 已送達。",
    "completed": "訂單已完成：{buyer} 的訂單 \"{title}\" 已完成。",
}
_SALES_STATUS_EMOJIS = {
    "pending": "🆕",
    "approved": "💰",
    "shipped": "📦",
    "delivered": "🎯",
    "completed": "🎉",
}

_FALLBACK_EMOJI = "📋"


def _status_label(status: str) -> str:
    return status[:1].upper() + status[1:]


def _orders_url(user_id: str) -> str:
    return f"/hk/{user_id}/my-orders"


def _settings_url(user_id: str) -> str:
    return f"/hk/{user_id}/company-settings"


def build_purchase_success(
    user_id: str, offer_title: str, amount: float, offer_id: str, purchase_id: str
) -> Notification:
    return Notification(
        user_id=user_id,
        type="purchase",
        title="購買成功！",
        message=f'您已成功購買 "{offer_title}"。',
        data={
            "offerId": offer_id,
            "purchaseId": purchase_id,
            "amount": amount,
            "actionUrl": _orders_url(user_id),
        },
        priority="high",
    )


def build_payment_received(user_id: str, amount: float, offer_title: str) -> Notification:
    return Notification(
        user_id=user_id,
        type="payment",
        title="收到付款",
        message=f'您的商品 "{offer_title}" 已收到 HKD {amount:.2f} 的付款。',
        data={"amount": amount},
        priority="medium",
    )


def build_watchlist_added(user_id: str, offer_title: str, offer_id: str) -> Notification:
    return Notification(
        user_id=user_id,
        type="watchlist",
        title="已加入願望清單",
        message=f'"{offer_title}" 已加入您的願望清單。',
        data={"offerId": offer_id},
        priority="low",
    )


def build_price_drop(
    user_id: str,
    offer_title: str,
    percentage: int,
    offer_id: str,
    previous_price: float,
    new_price: float,
) -> Notification:
    return Notification(
        user_id=user_id,
        type="price_drop",
        title="價格下降提醒！🎉",
        message=(
            f'"{offer_title}" 的價格已從 HKD {previous_price:.2f} '
            f"降至 HKD {new_price:.2f}（{percentage}% 折扣）！"
        ),
        data={
            "offerId": offer_id,
            "previousPrice": previous_price,
            "newPrice": new_price,
            "percentage": percentage,
            "actionUrl": f"/hk/marketplace/offer/{offer_id}",
        },
        priority="medium",
    )


def build_order_status_change(
    user_id: str, offer_title: str, status: str, purchase_id: str, offer_id: str
) -> Notification:
    emoji = _ORDER_STATUS_EMOJIS.get(status, _FALLBACK_EMOJI)
    prefix = _ORDER_STATUS_MESSAGES.get(status, "您的訂單狀態已更新")
    return Notification(
        user_id=user_id,
        type="order_status",
        title=f"訂單狀態：{_status_label(status)} {emoji}",
        message=f'{prefix} "{offer_title}"。',
        data={
            "offerId": offer_id,
            "purchaseId": purchase_id,
            "status": status,
            "actionUrl": _orders_url(user_id),
        },
        priority="high" if status in {"delivered", "completed"} else "medium",
    )


def build_offer_purchased(
    user_id: str,
    offer_title: str,
    buyer_company: str,
    amount: float,
    offer_id: str,
    purchase_id: str,
) -> Notification:
    return Notification(
        user_id=user_id,
        type="offer_purchased",
        title="收到新訂單！🎉",
        message=f'{buyer_company} 已購買 "{offer_title}"，金額為 HKD {amount:.2f}。',
        data={
            "offerId": offer_id,
            "purchaseId": purchase_id,
            "amount": amount,
            "actionUrl": _orders_url(user_id),
        },
        priority="high",
    )


def build_system_message(user_id: str, title: str, message: str) -> Notification:
    return Notification(
        user_id=user_id, type="system", title=title, message=message, priority="low"
    )


def build_account_status_change(user_id: str, status: str) -> Notification:
    emoji = _ACCOUNT_STATUS_EMOJIS.get(status, _FALLBACK_EMOJI)
    return Notification(
        user_id=user_id,
        type="account_status",
        title=f"帳戶狀態：{_status_label(status)} {emoji}",
        message=_ACCOUNT_STATUS_MESSAGES.get(status, "您的帳戶狀態已更新。"),
        data={"status": status, "actionUrl": _settings_url(user_id)},
        priority="high",
    )


def build_verification_status_change(user_id: str, status: str) -> Notification:
    emoji = _VERIFICATION_STATUS_EMOJIS.get(status, _FALLBACK_EMOJI)
    return Notification(
        user_id=user_id,
        type="verification_status",
        title=f"認證狀態：{_status_label(status)} {emoji}",
        message=_VERIFICATION_STATUS_MESSAGES.get(status, "您的認證狀態已更新。"),
        data={"status": status, "actionUrl": _settings_url(user_id)},
        priority="high",
    )


def build_offer_sales_status_change(
    user_id: str,
    offer_title: str,
    status: str,
    purchase_id: str,
    offer_id: str,
    buyer_company: str | None = None,
) -> Notification:
    emoji = _SALES_STATUS_EMOJIS.get(status, _FALLBACK_EMOJI)
    template = _SALES_STATUS_MESSAGES.get(status)
    if template is None:
        message = "您的優惠銷售狀態已更新。"
    else:
        message = template.format(buyer=buyer_company or "買家", title=offer_title)
    return Notification(
        user_id=user_id,
        type="offer_sales_status",
        title=f"銷售狀態：{_status_label(status)} {emoji}",
        message=message,
        data={
            "offerId": offer_id,
            "purchaseId": purchase_id,
            "status": status,
            "buyerCompany": buyer_company,
            "actionUrl": _orders_url(user_id),
        },
        priority="high" if status in {"pending", "completed"} else "medium",
    )


def build_payment_receipt_uploaded(
    admin_id: str, purchase_id: str, offer_id: str, buyer_id: str, amount: float
) -> Notification:
    return Notification(
        user_id=admin_id,
        type="payment",
        title="📄 新付款收據上傳",
        message=f"新付款收據已上傳 - 訂單: {purchase_id}，金額: HK${amount:.2f}",
        data={
            "purchaseId": purchase_id,
            "offerId": offer_id,
            "buyerId": buyer_id,
            "amount": amount,
            "actionUrl": f"/admin/purchases/{purchase_id}",
        },
        priority="high",
    )


def build_delivery_reminder(
    buyer_id: str, offer_title: str, purchase_id: str, reminder_count: int
) -> Notification:
    return Notification(
        user_id=buyer_id,
        type="order_status",
        title="📦 請確認收貨",
        message=f'您的訂單 "{offer_title}" 已發貨，請檢查是否已收到貨物並確認收貨。',
        data={
            "purchaseId": purchase_id,
            "offerTitle": offer_title,
            "reminderCount": reminder_count,
            "actionUrl": _orders_url(buyer_id),
        },
        priority="high",
    )


def build_delivery_escalation(
    admin_id: str,
    offer_title: str,
    purchase_id: str,
    buyer_company: str,
    seller_company: str,
    shipped_at: datetime | None,
    reminder_count: int,
) -> Notification:
    return Notification(
        user_id=admin_id,
        type="delivery_reminder",
        title="⚠️ 買家未確認收貨",
        message=(
            f'買家 {buyer_company} 在發貨後6小時仍未確認收到訂單 "{offer_title}" '
            f"(賣家: {seller_company})"
        ),
        data={
            "purchaseId": purchase_id,
            "offerTitle": offer_title,
            "buyerCompany": buyer_company,
            "sellerCompany": seller_company,
            "shippedAt": shipped_at.isoformat() if shipped_at else None,
            "reminderCount": reminder_count,
        },
        priority="high",
    )


def build_verification_review(
    user_id: str, company: str, approved: bool, reason: str | None = None
) -> Notification:
    data = {
        "verificationStatus": "approved" if approved else "rejected",
        "isVerified": approved,
        "companyName": company,
        "actionUrl": f"/hk/{user_id}/profile",
    }
    if approved:
        title = "驗證已通過！✅"
        message = f'恭喜！您的公司 "{company}" 的驗證已通過，現在可以正常使用所有功能。'
    else:
        title = "驗證被拒絕 ❌"
        message = f'很抱歉，您的公司 "{company}" 的驗證被拒絕。請檢查您的文件並重新提交。'
        data["rejectionReason"] = reason
    return Notification(
        user_id=user_id,
        type="verification_status",
        title=title,
        message=message,
        data=data,
        priority="high",
    )


class NotificationTriggers:
    """Raise the notifications caused by what a user just did.

    When the recipient has a session listening on ``bus`` the bare payload is
    published there, and that session persists it, collapses duplicates and
    mirrors it on the desktop. Otherwise the payload goes straight to
    ``store`` so it is waiting at the next sign-in.
    """

    def __init__(self, bus: NotificationEventBus, store: NotificationStore) -> None:
        self._bus = bus
        self._store = store

    async def _raise(self, notification: Notification) -> Notification | None:
        if self._bus.has_subscribers(notification.user_id):
            self._bus.trigger(notification)
            return notification
        try:
            notification_id = await self._store.add_notification(notification)
        except NotificationStoreError:
            logger.exception(
                "Could not store %s notification for %s", notification.type, notification.user_id
            )
            return None
        return replace(notification, id=notification_id)

    async def purchase_success(
        self, user_id: str, offer_title: str, amount: float, offer_id: str, purchase_id: str
    ) -> Notification | None:
        return await self._raise(
            build_purchase_success(user_id, offer_title, amount, offer_id, purchase_id)
        )

    async def payment_received(
        self, user_id: str, amount: float, offer_title: str
    ) -> Notification | None:
        return await self._raise(build_payment_received(user_id, amount, offer_title))

    async def watchlist_added(
        self, user_id: str, offer_title: str, offer_id: str
    ) -> Notification | None:
        return await self._raise(build_watchlist_added(user_id, offer_title, offer_id))

    async def system_message(
        self, user_id: str, title: str, message: str
    ) -> Notification | None:
        return await self._raise(build_system_message(user_id, title, message))


__all__ = [
    "NotificationTriggers",
    "build_account_status_change",
    "build_delivery_escalation",
    "build_delivery_reminder",
    "build_offer_purchased",
    "build_offer_sales_status_change",
    "build_order_status_change",
    "build_payment_received",
    "build_payment_receipt_uploaded",
    "build_price_drop",
    "build_purchase_success",
    "build_system_message",
    "build_verification_review",
    "build_verification_status_change",
    "build_watchlist_added",
]
