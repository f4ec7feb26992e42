"""
Database models for the Arcade Market API.

The models describe the embedded (SQLite) schema; the hosted backend uses the
equivalent PostgreSQL schema in scripts/remote_schema.sql.
"""

from arcade_market.models.shop import Shop, Admin
from arcade_market.models.product import Product, ProductSize
from arcade_market.models.order import Order
from arcade_market.models.subscription import ShopSubscription, PushSubscription

__all__ = [
    "Shop",
    "Admin",
    "Product",
    "ProductSize",
    "Order",
    "ShopSubscription",
    "PushSubscription",
]
