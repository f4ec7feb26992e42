"""
Shop authentication API endpoints.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status

from arcade_market.config import Settings
from arcade_market.core.errors import UnauthorizedError
from arcade_market.core.limiter import limiter
from arcade_market.data import Database
from arcade_market.dependencies import Identity, get_current_shop, get_database, get_identity, get_settings
from arcade_market.schemas import ShopLogin, ShopRegister
from arcade_market.services.auth_service import auth_service, public_shop

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    shop_in: ShopRegister,
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_settings),
) -> Any:
    """
    Register a new shop. The shop stays pending until an admin activates it.
    """
    shop = await auth_service.register_shop(db, shop_in, settings)
    return {"message": "Shop registered successfully", "shop_id": shop["id"]}


async def shop_login(credentials: ShopLogin, db: Database, settings: Settings) -> Dict[str, Any]:
    """Check shop credentials and build the login response."""
    shop = await auth_service.authenticate_shop(db, credentials.email, credentials.password)
    if not shop:
        logger.info(f"Failed shop login for {credentials.email}")
        raise UnauthorizedError("Invalid credentials")
    return {
        "message": "Login successful",
        "token": auth_service.create_shop_token(shop, settings),
        "shop": public_shop(shop),
    }


@router.post("/login")
@limiter.limit("5/minute")
async def login(
    request: Request,
    credentials: ShopLogin,
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_settings),
) -> Any:
    """
    Shop login, returns a bearer token valid for ACCESS_TOKEN_EXPIRE_MINUTES.
    """
    return await shop_login(credentials, db, settings)


@router.get("/me")
async def read_current_shop(
    identity: Identity = Depends(get_identity),
    shop: Dict[str, Any] = Depends(get_current_shop),
) -> Any:
    """
    Check the token: who it belongs to and whether that shop still exists.
    """
    return {
        "valid": True,
        "shop": public_shop(shop),
        "token_info": {
            "shop_id": identity.subject_id,
            "shop_number": identity.claims.get("shop_number"),
            "iat": identity.claims.get("iat"),
            "exp": identity.claims.get("exp"),
        },
    }
