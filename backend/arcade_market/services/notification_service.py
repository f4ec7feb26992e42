"""
Notification Service.

Stores one browser push subscription per shop and hands notifications to a
sender. Delivery (web push) is not done here: the default sender only logs,
and deployments can plug in a real one with ``NotificationService(sender)``.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from arcade_market.core.errors import unwrap
from arcade_market.data import Database

logger = logging.getLogger(__name__)

Sender = Callable[[Dict[str, Any], Dict[str, Any]], Awaitable[None]]

ICON = "/icon-192x192.png"
BADGE = "/badge-72x72.png"


async def log_sender(subscription: Dict[str, Any], payload: Dict[str, Any]) -> None:
    endpoint = subscription.get("endpoint", "unknown endpoint")
    logger.info(f"Push notification '{payload['title']}' queued for {endpoint}")


class NotificationService:
    def __init__(self, sender: Optional[Sender] = None):
        self.sender = sender or log_sender

    async def save_subscription(self, db: Database, shop_id: int, subscription: Dict[str, Any]) -> None:
        """Replace the shop's push subscription."""
        result = await (
            db.table("push_subscriptions")
            .replace({"shop_id": shop_id, "subscription_data": subscription})
            .eq("shop_id", shop_id)
        )
        unwrap(result, "Failed to save subscription")

    async def notify_shop(self, db: Database, shop_id: int, title: str, body: str) -> bool:
        """
        Send a notification to a shop's registered browser.

        Returns False when the shop has no subscription or sending failed;
        never raises, so callers can fire and forget.
        """
        result = await (
            db.table("push_subscriptions")
            .select("subscription_data")
            .eq("shop_id", shop_id)
            .single()
        )
        if result.error is not None or not result.data:
            logger.info(f"No push subscription found for shop {shop_id}")
            return False

        payload = {"title": title, "body": body, "icon": ICON, "badge": BADGE}
        try:
            await self.sender(result.data["subscription_data"], payload)
        except Exception as e:
            logger.error(f"Error sending notification to shop {shop_id}: {e}")
            return False
        logger.info(f"Notification sent to shop {shop_id}")
        return True


notification_service = NotificationService()
