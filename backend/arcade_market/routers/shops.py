"""
API endpoints for shops: public directory and the shop's own profile.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Request

from arcade_market.config import Settings
from arcade_market.core.errors import BadRequestError, NotFoundError, unwrap
from arcade_market.core.limiter import limiter
from arcade_market.data import Database
from arcade_market.dependencies import (
    get_current_admin,
    get_current_shop,
    get_database,
    get_settings,
)
from arcade_market.routers.auth import shop_login
from arcade_market.schemas import PasswordChange, ShopLogin, ShopProfile, ShopProfileUpdate, ShopPublic
from arcade_market.services.auth_service import UNIQUE_VIOLATION, auth_service
from arcade_market.services.product_service import product_service

logger = logging.getLogger(__name__)

router = APIRouter()

PUBLIC_COLUMNS = "id, shop_number, shop_name, contact, email, status"


@router.get("", response_model=List[ShopPublic])
async def list_active_shops(db: Database = Depends(get_database)):
    """List active shops, ordered by shop number."""
    result = await (
        db.table("shops").select(PUBLIC_COLUMNS).eq("status", "active").order("shop_number")
    )
    return unwrap(result)


@router.post("/login")
@limiter.limit("5/minute")
async def login(
    request: Request,
    credentials: ShopLogin,
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_settings),
):
    """Same as ``POST /auth/login``; older clients log in here."""
    return await shop_login(credentials, db, settings)


@router.get("/admin/all")
async def list_all_shops(
    admin: Dict[str, Any] = Depends(get_current_admin),
    db: Database = Depends(get_database),
):
    """All shops including pending ones (admin only)."""
    result = await (
        db.table("shops")
        .select(f"{PUBLIC_COLUMNS}, created_at")
        .order("created_at", ascending=False)
    )
    return unwrap(result)


@router.get("/profile", response_model=ShopProfile)
async def read_profile(shop: Dict[str, Any] = Depends(get_current_shop)):
    return shop


@router.put("/profile")
async def update_profile(
    profile_in: ShopProfileUpdate,
    shop: Dict[str, Any] = Depends(get_current_shop),
    db: Database = Depends(get_database),
):
    """Update the shop's own contact and payment details."""
    patch = profile_in.model_dump(exclude_unset=True)
    if not patch:
        return {"message": "Profile updated successfully"}

    result = await db.table("shops").update(patch).eq("id", shop["id"])
    if result.error is not None and result.error.code == UNIQUE_VIOLATION:
        raise BadRequestError("Email already in use by another shop")
    unwrap(result)
    return {"message": "Profile updated successfully"}


@router.put("/change-password")
async def change_password(
    password_in: PasswordChange,
    shop: Dict[str, Any] = Depends(get_current_shop),
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_settings),
):
    await auth_service.change_password(
        db, "shops", shop["id"], password_in.current_password, password_in.new_password, settings
    )
    return {"message": "Password updated successfully"}


@router.get("/{shop_id}/products")
async def list_shop_products(shop_id: int, db: Database = Depends(get_database)):
    """Products of one active shop (public)."""
    shop = unwrap(
        await db.table("shops")
        .select("id, shop_number, shop_name, contact")
        .eq("id", shop_id)
        .eq("status", "active")
        .single()
    )
    if not shop:
        raise NotFoundError("Shop not found or not active")

    products = await product_service.shop_products(db, shop_id)
    for product in products:
        product.update(
            shop_number=shop["shop_number"], shop_name=shop["shop_name"], contact=shop["contact"]
        )
    return {"shop": shop, "products": products}
