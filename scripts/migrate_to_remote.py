"""
Copy every collection from the embedded SQLite database to the hosted backend.

Both sides go through the same Database facade. Rows keep their ids; run the
sequence reset at the end of scripts/remote_schema.sql afterwards.

    python scripts/migrate_to_remote.py [--dry-run]
"""

import argparse
import asyncio
import logging
import os
import sys

# Add backend to path
sys.path.append(os.path.join(os.path.dirname(__file__), "../backend"))

from arcade_market.config import Settings
from arcade_market.data import Database
from arcade_market.data.embedded import EmbeddedExecutor
from arcade_market.data.remote import RemoteExecutor
from arcade_market.database import build_engine, load_metadata

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("migrate_to_remote")

# Parents before children so foreign keys resolve
COLLECTIONS = [
    "shops",
    "admins",
    "products",
    "product_sizes",
    "orders",
    "shop_subscriptions",
    "push_subscriptions",
]
BATCH_SIZE = 500


async def migrate(settings: Settings, dry_run: bool = False) -> int:
    """Returns the number of collections that failed to copy."""
    if not settings.remote_backend_configured():
        logger.error("SUPABASE_PROJECT_URL / SUPABASE_API_KEY are not configured")
        return len(COLLECTIONS)

    source = Database(EmbeddedExecutor(build_engine(settings), load_metadata()))
    target = Database(
        RemoteExecutor(
            settings.SUPABASE_PROJECT_URL,
            settings.SUPABASE_API_KEY,
            timeout=settings.SUPABASE_TIMEOUT,
        )
    )
    logger.info(f"Source: {settings.DATABASE_URL}")
    logger.info(f"Target: {settings.SUPABASE_PROJECT_URL}")

    failures = 0
    try:
        for collection in COLLECTIONS:
            rows, error = await source.table(collection).select().order("id")
            if error is not None:
                logger.error(f"Reading {collection} failed: {error.message}")
                failures += 1
                continue

            logger.info(f"Migrating {collection}: {len(rows)} rows")
            if dry_run or not rows:
                continue

            for start in range(0, len(rows), BATCH_SIZE):
                batch = rows[start:start + BATCH_SIZE]
                result = await target.table(collection).insert(batch)
                if result.error is not None:
                    logger.error(
                        f"Writing {collection} rows {start}-{start + len(batch)} failed: "
                        f"{result.error.message} (code={result.error.code})"
                    )
                    failures += 1
                    break
    finally:
        await source.close()
        await target.close()

    if failures:
        logger.warning(f"Migration finished with {failures} failed collections")
    else:
        logger.info("Migration completed successfully")
    return failures


def main() -> None:
    parser = argparse.ArgumentParser(description="Copy the embedded database to the hosted backend")
    parser.add_argument("--dry-run", action="store_true", help="only report row counts")
    args = parser.parse_args()
    failures = asyncio.run(migrate(Settings(), dry_run=args.dry_run))
    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
