"""
Tests for the demo data seeding script
"""
import os
import sys

import pytest

from arcade_market.core import security

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../scripts"))

import seed_test_data  # noqa: E402


@pytest.mark.unit
@pytest.mark.asyncio
class TestSeedData:
    async def test_seed_creates_demo_rows(self, db, settings, sql):
        created = await seed_test_data.seed(db, settings, password="demo-pass")
        assert created == {"admins": 1, "shops": 2, "products": 2}

        shops = sql("SELECT shop_number, status, password FROM shops ORDER BY shop_number")
        assert [(row[0], row[1]) for row in shops] == [("SH001", "active"), ("SH002", "pending")]
        assert security.verify_password("demo-pass", shops[0][2])

        sizes = sql(
            "SELECT p.name, s.size, s.in_stock, s.quantity FROM product_sizes s "
            "JOIN products p ON p.id = s.product_id ORDER BY p.name, s.size"
        )
        assert [tuple(row) for row in sizes if row[0] == "Nike Air Max"] == [
            ("Nike Air Max", "7", 1, 5),
            ("Nike Air Max", "8", 1, 3),
            ("Nike Air Max", "9", 0, 0),
        ]
        assert len(sizes) == 6

    async def test_seed_is_repeatable(self, db, settings, sql):
        await seed_test_data.seed(db, settings)
        created = await seed_test_data.seed(db, settings)

        assert created == {"admins": 0, "shops": 0, "products": 0}
        assert sql("SELECT COUNT(*) FROM products")[0][0] == 2
        assert sql("SELECT COUNT(*) FROM product_sizes")[0][0] == 6
