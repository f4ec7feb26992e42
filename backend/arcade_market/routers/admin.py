"""
Admin API endpoints: shop approval, subscription plans and dashboard stats.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from arcade_market.config import Settings
from arcade_market.core.errors import NotFoundError, UnauthorizedError, unwrap
from arcade_market.core.limiter import limiter
from arcade_market.data import Database
from arcade_market.dependencies import get_current_admin, get_database, get_settings
from arcade_market.schemas import (
    AdminLogin,
    AdminStats,
    PasswordChange,
    ShopStatusUpdate,
    SubscriptionUpdate,
)
from arcade_market.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter()

SHOP_COLUMNS = (
    "id, shop_number, shop_name, contact, email, status, "
    "till_number, payment_provider, payment_notes, created_at"
)


@router.post("/login")
@limiter.limit("5/minute")
async def login(
    request: Request,
    credentials: AdminLogin,
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_settings),
) -> Any:
    admin = await auth_service.authenticate_admin(db, credentials.username, credentials.password)
    if not admin:
        logger.info(f"Failed admin login for {credentials.username}")
        raise UnauthorizedError("Invalid credentials")
    return {
        "message": "Login successful",
        "token": auth_service.create_admin_token(admin, settings),
        "admin": {"id": admin["id"], "username": admin["username"], "email": admin["email"]},
    }


@router.get("/shops")
async def list_shops(
    admin: Dict[str, Any] = Depends(get_current_admin),
    db: Database = Depends(get_database),
):
    """All shops, newest first, with their current subscription plan."""
    shops = unwrap(
        await db.table("shops").select(SHOP_COLUMNS).order("created_at", ascending=False)
    )
    if not shops:
        return []

    subscriptions = unwrap(
        await db.table("shop_subscriptions")
        .select("shop_id, plan, status, monthly_fee")
        .in_("shop_id", [shop["id"] for shop in shops])
        .order("id", ascending=False)
    )
    latest: Dict[int, Dict[str, Any]] = {}
    for subscription in subscriptions:
        latest.setdefault(subscription["shop_id"], subscription)

    listed = []
    for shop in shops:
        subscription = latest.get(shop["id"], {})
        listed.append(
            {
                **shop,
                "plan": subscription.get("plan") or "free",
                "subscription_status": subscription.get("status") or "active",
                "monthly_fee": subscription.get("monthly_fee") or 0,
            }
        )
    return listed


@router.put("/shops/{shop_id}/status")
async def update_shop_status(
    shop_id: int,
    status_in: ShopStatusUpdate,
    admin: Dict[str, Any] = Depends(get_current_admin),
    db: Database = Depends(get_database),
):
    updated = unwrap(
        await db.table("shops").update({"status": status_in.status}).eq("id", shop_id).select("id")
    )
    if not updated:
        raise NotFoundError("Shop not found")
    logger.info(f"Admin {admin['username']} set shop {shop_id} status to {status_in.status}")
    return {"message": "Shop status updated successfully"}


@router.put("/shops/{shop_id}/subscription")
async def update_shop_subscription(
    shop_id: int,
    subscription_in: SubscriptionUpdate,
    admin: Dict[str, Any] = Depends(get_current_admin),
    db: Database = Depends(get_database),
):
    """Replace the shop's subscription; earlier plans are not kept."""
    shop = unwrap(await db.table("shops").select("id").eq("id", shop_id).single())
    if not shop:
        raise NotFoundError("Shop not found")

    record = {
        "shop_id": shop_id,
        "plan": subscription_in.plan,
        "monthly_fee": subscription_in.monthly_fee,
        "status": subscription_in.status,
        "start_date": datetime.utcnow(),
        "end_date": subscription_in.end_date,
    }
    result = await db.table("shop_subscriptions").replace(record).eq("shop_id", shop_id)
    unwrap(result, "Failed to update subscription")
    logger.info(f"Admin {admin['username']} moved shop {shop_id} to plan {subscription_in.plan}")
    return {"message": "Shop subscription updated successfully"}


@router.put("/change-password")
async def change_password(
    password_in: PasswordChange,
    admin: Dict[str, Any] = Depends(get_current_admin),
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_settings),
):
    await auth_service.change_password(
        db, "admins", admin["id"], password_in.current_password, password_in.new_password, settings
    )
    return {"message": "Password updated successfully"}


@router.get("/stats", response_model=AdminStats)
async def read_stats(
    admin: Dict[str, Any] = Depends(get_current_admin),
    db: Database = Depends(get_database),
):
    """Dashboard counters, queried concurrently."""
    results = await asyncio.gather(
        db.table("shops").select("id", count="exact").execute(),
        db.table("shops").select("id", count="exact").eq("status", "active").execute(),
        db.table("products").select("id", count="exact").execute(),
        db.table("orders").select("id", count="exact").execute(),
    )
    for result in results:
        unwrap(result)
    shops, active_shops, products, orders = (result.count or 0 for result in results)
    return {
        "totalShops": shops,
        "activeShops": active_shops,
        "totalProducts": products,
        "totalOrders": orders,
    }
