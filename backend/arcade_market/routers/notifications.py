"""
Push notification subscription endpoints.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from arcade_market.config import Settings
from arcade_market.data import Database
from arcade_market.dependencies import get_current_shop, get_database, get_notifier, get_settings
from arcade_market.schemas import PushSubscriptionIn
from arcade_market.services.notification_service import NotificationService

router = APIRouter()


@router.post("/subscribe")
async def subscribe(
    subscription_in: PushSubscriptionIn,
    shop: Dict[str, Any] = Depends(get_current_shop),
    db: Database = Depends(get_database),
    notifier: NotificationService = Depends(get_notifier),
):
    """Register this browser for the shop's order notifications."""
    await notifier.save_subscription(db, shop["id"], subscription_in.subscription)
    return {"message": "Subscription saved successfully"}


@router.get("/vapid-key")
async def read_vapid_key(settings: Settings = Depends(get_settings)):
    return {"publicKey": settings.VAPID_PUBLIC_KEY}
