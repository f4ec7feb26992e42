"""
Create (or reset) an admin account on the configured backend.

    python scripts/init_admin.py --username admin --email admin@example.com

The password is read from --password or prompted for.
"""

import argparse
import asyncio
import getpass
import logging
import os
import sys

# Add backend to path
sys.path.append(os.path.join(os.path.dirname(__file__), "../backend"))

from arcade_market.config import Settings
from arcade_market.core import security
from arcade_market.core.errors import unwrap
from arcade_market.data import create_database

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("init_admin")


async def init_admin(username: str, email: str, password: str, reset: bool) -> None:
    settings = Settings()
    db = create_database(settings)
    await db.initialize()
    try:
        existing = unwrap(
            await db.table("admins").select("id").eq("username", username).limit(1).single()
        )
        hashed = security.get_password_hash(password, rounds=settings.PASSWORD_HASH_ROUNDS)
        if existing and not reset:
            logger.info(f"Admin '{username}' already exists (use --reset to change its password)")
            return
        if existing:
            unwrap(await db.table("admins").update({"password": hashed}).eq("id", existing["id"]))
            logger.info(f"Password reset for admin '{username}'")
            return
        unwrap(
            await db.table("admins").insert(
                {"username": username, "email": email, "password": hashed}
            )
        )
        logger.info(f"Admin '{username}' created on the {db.backend} backend")
    finally:
        await db.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the marketplace admin account")
    parser.add_argument("--username", default="admin")
    parser.add_argument("--email", default="admin@kamukunji.com")
    parser.add_argument("--password")
    parser.add_argument("--reset", action="store_true", help="reset the password if the admin exists")
    args = parser.parse_args()

    password = args.password or getpass.getpass("Admin password: ")
    if len(password) < 6:
        parser.error("password must be at least 6 characters")
    asyncio.run(init_admin(args.username, args.email, password, args.reset))


if __name__ == "__main__":
    main()
