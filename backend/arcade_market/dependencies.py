"""
Shared API dependencies: settings, database and the authenticated identity.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError

from arcade_market.config import Settings
from arcade_market.core import security
from arcade_market.core.errors import ForbiddenError, UnauthorizedError, unwrap
from arcade_market.data import Database

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

ROLE_SHOP = "shop"
ROLE_ADMIN = "admin"

SHOP_PROFILE_COLUMNS = (
    "id, shop_number, shop_name, contact, email, status, "
    "till_number, payment_provider, payment_notes"
)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


@dataclass
class Identity:
    """Who the bearer token says the caller is."""

    subject_id: int
    role: str
    claims: Dict[str, Any] = field(default_factory=dict)


async def get_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> Identity:
    """
    Validate the bearer token and return the identity it carries.
    """
    if credentials is None:
        raise UnauthorizedError("Access token required", code="TOKEN_MISSING")

    try:
        payload = security.decode_access_token(credentials.credentials, settings)
    except ExpiredSignatureError:
        raise UnauthorizedError("Token expired. Please log in again.", code="TOKEN_EXPIRED")
    except JWTError:
        raise UnauthorizedError("Invalid token", code="TOKEN_INVALID")

    role = payload.get("role")
    subject = payload.get("shop_id") if role == ROLE_SHOP else payload.get("admin_id")
    if role not in (ROLE_SHOP, ROLE_ADMIN) or subject is None:
        raise UnauthorizedError("Invalid token", code="TOKEN_INVALID")

    return Identity(subject_id=int(subject), role=role, claims=payload)


async def get_current_shop(
    request: Request,
    identity: Identity = Depends(get_identity),
    db: Database = Depends(get_database),
) -> Dict[str, Any]:
    """
    Resolve the token to a live shop row.

    A token for a shop that no longer exists answers 401 ``INVALID_SHOP`` so
    the client knows to drop its cached credentials.
    """
    if identity.role != ROLE_SHOP:
        raise ForbiddenError("Shop account required", code="ROLE_FORBIDDEN")

    result = await (
        db.table("shops").select(SHOP_PROFILE_COLUMNS).eq("id", identity.subject_id).single()
    )
    shop = unwrap(result)
    if shop is None:
        client = request.client.host if request.client else "unknown"
        logger.warning(
            f"Shop not found: {identity.subject_id} "
            f"({identity.claims.get('shop_number', 'unknown')}) - IP: {client}"
        )
        raise UnauthorizedError(
            "Invalid shop. Please log in again.",
            code="INVALID_SHOP",
            details="Your session has expired or shop no longer exists",
        )
    return shop


async def get_current_admin(
    identity: Identity = Depends(get_identity),
    db: Database = Depends(get_database),
) -> Dict[str, Any]:
    """Resolve the token to a live admin row."""
    if identity.role != ROLE_ADMIN:
        raise ForbiddenError("Admin account required", code="ROLE_FORBIDDEN")

    result = await (
        db.table("admins").select("id, username, email").eq("id", identity.subject_id).single()
    )
    admin = unwrap(result)
    if admin is None:
        raise UnauthorizedError("Invalid admin. Please log in again.", code="INVALID_ADMIN")
    return admin


def get_notifier(request: Request):
    """The app's ``NotificationService`` (replaceable per app, e.g. in tests)."""
    return request.app.state.notifier
