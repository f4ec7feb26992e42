"""
Authentication Service.
"""

import logging
from typing import Any, Dict, Optional

from arcade_market.config import Settings
from arcade_market.core import security
from arcade_market.core.errors import BadRequestError, UnauthorizedError, unwrap
from arcade_market.data import Database, quote_value
from arcade_market.schemas import ShopRegister

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


def public_shop(shop: Dict[str, Any]) -> Dict[str, Any]:
    """Shop fields that are safe to hand to the client."""
    return {
        "id": shop["id"],
        "shop_number": shop["shop_number"],
        "shop_name": shop["shop_name"],
        "contact": shop["contact"],
        "email": shop["email"],
        "status": shop["status"],
    }


class AuthService:
    async def register_shop(self, db: Database, shop_in: ShopRegister, settings: Settings) -> Dict[str, Any]:
        """Create a pending shop with a default free subscription."""
        expression = (
            f"shop_number.eq.{quote_value(shop_in.shop_number)},"
            f"email.eq.{quote_value(shop_in.email)}"
        )
        result = await db.table("shops").select("id").or_(expression).limit(1)
        if unwrap(result):
            raise BadRequestError("Shop number or email already exists")

        record = shop_in.model_dump()
        record["password"] = security.get_password_hash(
            shop_in.password, rounds=settings.PASSWORD_HASH_ROUNDS
        )
        record["status"] = "pending"

        result = await db.table("shops").insert(record).select().single()
        if result.error is not None and result.error.code == UNIQUE_VIOLATION:
            # Lost a race with a concurrent registration
            raise BadRequestError("Shop number or email already exists")
        shop = unwrap(result, "Failed to create shop")

        subscription = await db.table("shop_subscriptions").insert(
            {"shop_id": shop["id"], "plan": "free", "monthly_fee": 0, "status": "active"}
        )
        if subscription.error is not None:
            logger.error(
                f"Failed to create subscription for shop {shop['id']}: {subscription.error.message}"
            )

        logger.info(f"Registered shop {shop['shop_number']} (id={shop['id']})")
        return shop

    async def authenticate_shop(self, db: Database, email: str, password: str) -> Optional[Dict[str, Any]]:
        """Authenticate a shop by email and password."""
        shop = unwrap(await db.table("shops").select().eq("email", email).limit(1).single())
        if not shop:
            return None
        if not security.verify_password(password, shop["password"]):
            return None
        return shop

    async def authenticate_admin(self, db: Database, username: str, password: str) -> Optional[Dict[str, Any]]:
        """Authenticate an admin by username and password."""
        admin = unwrap(await db.table("admins").select().eq("username", username).limit(1).single())
        if not admin:
            return None
        if not security.verify_password(password, admin["password"]):
            return None
        return admin

    def create_shop_token(self, shop: Dict[str, Any], settings: Settings) -> str:
        return security.create_access_token(
            data={
                "sub": str(shop["id"]),
                "shop_id": shop["id"],
                "shop_number": shop["shop_number"],
                "role": "shop",
            },
            settings=settings,
        )

    def create_admin_token(self, admin: Dict[str, Any], settings: Settings) -> str:
        return security.create_access_token(
            data={
                "sub": str(admin["id"]),
                "admin_id": admin["id"],
                "username": admin["username"],
                "role": "admin",
            },
            settings=settings,
        )

    async def change_password(
        self,
        db: Database,
        collection: str,
        account_id: int,
        current_password: str,
        new_password: str,
        settings: Settings,
    ) -> None:
        """Verify ``current_password`` and store a hash of ``new_password``."""
        account = unwrap(
            await db.table(collection).select("id, password").eq("id", account_id).single()
        )
        if not account:
            raise UnauthorizedError("Account no longer exists")
        if not security.verify_password(current_password, account["password"]):
            raise BadRequestError("Current password is incorrect")

        hashed = security.get_password_hash(new_password, rounds=settings.PASSWORD_HASH_ROUNDS)
        result = await db.table(collection).update({"password": hashed}).eq("id", account_id)
        unwrap(result, "Failed to update password")
        logger.info(f"Password changed for {collection} id={account_id}")

    async def ensure_default_admin(self, db: Database, settings: Settings) -> bool:
        """Create the bootstrap admin if no admin with that username exists."""
        existing = unwrap(
            await db.table("admins")
            .select("id")
            .eq("username", settings.DEFAULT_ADMIN_USERNAME)
            .limit(1)
            .single()
        )
        if existing:
            return False

        result = await db.table("admins").insert(
            {
                "username": settings.DEFAULT_ADMIN_USERNAME,
                "email": settings.DEFAULT_ADMIN_EMAIL,
                "password": security.get_password_hash(
                    settings.DEFAULT_ADMIN_PASSWORD, rounds=settings.PASSWORD_HASH_ROUNDS
                ),
            }
        )
        unwrap(result, "Failed to create default admin")
        logger.warning(
            f"Created default admin '{settings.DEFAULT_ADMIN_USERNAME}'; change its password"
        )
        return True


auth_service = AuthService()
