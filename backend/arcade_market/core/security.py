"""
Security utilities including password hashing and JWT token generation.
"""

import bcrypt
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt

from arcade_market.config import Settings

# JWT configuration
ALGORITHM = "HS256"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    # Ensure password is bytes for bcrypt
    if isinstance(plain_password, str):
        plain_password = plain_password.encode("utf-8")
    if isinstance(hashed_password, str):
        hashed_password = hashed_password.encode("utf-8")
    try:
        return bcrypt.checkpw(plain_password, hashed_password)
    except ValueError:
        # Malformed stored hash
        return False


def get_password_hash(password: str, rounds: int = 12) -> str:
    """Generate a password hash."""
    if isinstance(password, str):
        password = password.encode("utf-8")
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password, salt)
    return hashed.decode("utf-8")


def create_access_token(
    data: Dict[str, Any], settings: Settings, expires_delta: Optional[timedelta] = None
) -> str:
    """Create a new JWT access token."""
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    now = datetime.now(timezone.utc)
    to_encode.update({"iat": now, "exp": now + expires_delta})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> Dict[str, Any]:
    """Decode and verify a token. Raises ``jose.JWTError`` subclasses."""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
