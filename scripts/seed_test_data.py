"""
Fill the configured backend with demo data for local development.

Creates the default admin, an active shop (SH001) with two products and a
pending shop (SH002). Existing rows are left alone, so the script can be run
repeatedly.

    python scripts/seed_test_data.py [--password password123]
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import Dict

# Add backend to path
sys.path.append(os.path.join(os.path.dirname(__file__), "../backend"))

from arcade_market.config import Settings
from arcade_market.core import security
from arcade_market.core.errors import unwrap
from arcade_market.data import Database, create_database
from arcade_market.services.auth_service import auth_service

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("seed_test_data")

SHOPS = [
    {
        "shop_number": "SH001",
        "shop_name": "Test Shop 1",
        "contact": "0712345678",
        "email": "shop1@test.com",
        "status": "active",
    },
    {
        "shop_number": "SH002",
        "shop_name": "Test Shop 2",
        "contact": "0723456789",
        "email": "shop2@test.com",
        "status": "pending",
    },
]

PRODUCTS = [
    {
        "name": "Nike Air Max",
        "description": "Comfortable running shoes",
        "price": 15000,
        "category": "shoes",
        "image_url": "https://via.placeholder.com/300x300",
        "public_id": "test-product-1",
    },
    {
        "name": "Adidas Stan Smith",
        "description": "Classic white sneakers",
        "price": 12000,
        "category": "shoes",
        "image_url": "https://via.placeholder.com/300x300",
        "public_id": "test-product-2",
    },
]

# (size, in_stock, quantity)
SIZES = [("7", True, 5), ("8", True, 3), ("9", False, 0)]


async def seed(db: Database, settings: Settings, password: str = "password123") -> Dict[str, int]:
    """Insert whatever demo rows are missing; returns how many of each were created."""
    created = {"admins": 0, "shops": 0, "products": 0}
    if await auth_service.ensure_default_admin(db, settings):
        created["admins"] += 1

    hashed = security.get_password_hash(password, rounds=settings.PASSWORD_HASH_ROUNDS)
    for shop in SHOPS:
        existing = unwrap(
            await db.table("shops").select("id").eq("shop_number", shop["shop_number"]).limit(1).single()
        )
        if existing:
            logger.info(f"Shop {shop['shop_number']} already exists")
            continue
        unwrap(await db.table("shops").insert({**shop, "password": hashed}))
        created["shops"] += 1
        logger.info(f"Shop {shop['shop_number']} created")

    owner = unwrap(await db.table("shops").select("id").eq("shop_number", "SH001").single())
    for product in PRODUCTS:
        existing = unwrap(
            await db.table("products")
            .select("id")
            .eq("name", product["name"])
            .eq("shop_id", owner["id"])
            .limit(1)
            .single()
        )
        if existing:
            logger.info(f"Product {product['name']} already exists")
            continue
        row = unwrap(
            await db.table("products").insert({**product, "shop_id": owner["id"]}).select("id").single()
        )
        unwrap(
            await db.table("product_sizes").insert(
                [
                    {"product_id": row["id"], "size": size, "in_stock": in_stock, "quantity": quantity}
                    for size, in_stock, quantity in SIZES
                ]
            )
        )
        created["products"] += 1
        logger.info(f"Product {product['name']} created with {len(SIZES)} sizes")

    return created


async def run(password: str) -> None:
    settings = Settings()
    db = create_database(settings)
    await db.initialize()
    try:
        created = await seed(db, settings, password)
        logger.info(f"Seeding finished on the {db.backend} backend: {created}")
    finally:
        await db.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed demo shops and products")
    parser.add_argument("--password", default="password123", help="password for the demo shops")
    args = parser.parse_args()
    asyncio.run(run(args.password))


if __name__ == "__main__":
    main()
