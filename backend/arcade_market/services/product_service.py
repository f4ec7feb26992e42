"""
Product Service.

Products and their sizes live in separate collections. Listings are composed
from one products query plus one ``in_`` query on sizes (and on shops for the
public search), which works the same way on both backends.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from arcade_market.core.errors import unwrap
from arcade_market.data import Database, text_search
from arcade_market.schemas import SizeIn

logger = logging.getLogger(__name__)

SEARCH_COLUMNS = ("name", "description")
SHOP_FIELDS = ("shop_number", "shop_name", "contact")


def size_records(product_id: int, sizes: Iterable[SizeIn]) -> List[Dict[str, Any]]:
    return [
        {
            "product_id": product_id,
            "size": size.size,
            "in_stock": size.in_stock,
            "quantity": size.quantity or 0,
        }
        for size in sizes
    ]


def format_sizes(sizes: List[Dict[str, Any]], with_quantity: bool = True) -> str:
    """
    Compact size summary used by the storefront, e.g. ``"8:1:3,9:0:0"``
    (size, in-stock flag, quantity). Public listings omit the quantity.
    """
    parts = []
    for size in sizes:
        flag = "1" if size.get("in_stock") else "0"
        if with_quantity:
            parts.append(f"{size['size']}:{flag}:{size.get('quantity') or 0}")
        else:
            parts.append(f"{size['size']}:{flag}")
    return ",".join(parts)


class ProductService:
    async def attach_sizes(
        self, db: Database, products: List[Dict[str, Any]], with_quantity: bool = True
    ) -> List[Dict[str, Any]]:
        """Add ``product_sizes`` (rows) and ``sizes`` (summary) to each product."""
        if not products:
            return []
        ids = [product["id"] for product in products]
        rows = unwrap(
            await db.table("product_sizes")
            .select("product_id, size, in_stock, quantity")
            .in_("product_id", ids)
            .order("id")
        )

        by_product: Dict[int, List[Dict[str, Any]]] = {}
        for row in rows:
            by_product.setdefault(row["product_id"], []).append(
                {key: row[key] for key in ("size", "in_stock", "quantity")}
            )

        listed = []
        for product in products:
            sizes = by_product.get(product["id"], [])
            listed.append(
                {**product, "product_sizes": sizes, "sizes": format_sizes(sizes, with_quantity)}
            )
        return listed

    def _filtered(
        self,
        query,
        text: Optional[str],
        category: Optional[str],
        min_price: Optional[float],
        max_price: Optional[float],
    ):
        if text:
            query = query.or_(text_search(SEARCH_COLUMNS, text))
        if category:
            query = query.eq("category", category)
        if min_price is not None:
            query = query.gte("price", min_price)
        if max_price is not None:
            query = query.lte("price", max_price)
        return query.order("created_at", ascending=False)

    async def search(
        self,
        db: Database,
        text: Optional[str] = None,
        category: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> List[Dict[str, Any]]:
        """Public search across every shop that is not closed, newest first."""
        shops = unwrap(
            await db.table("shops")
            .select("id, shop_number, shop_name, contact")
            .neq("status", "closed")
        )
        if not shops:
            return []
        shops_by_id = {shop["id"]: shop for shop in shops}

        query = db.table("products").select().in_("shop_id", list(shops_by_id))
        products = unwrap(await self._filtered(query, text, category, min_price, max_price))

        for product in products:
            shop = shops_by_id[product["shop_id"]]
            product.update({field: shop[field] for field in SHOP_FIELDS})
        return await self.attach_sizes(db, products, with_quantity=False)

    async def shop_products(
        self,
        db: Database,
        shop_id: int,
        text: Optional[str] = None,
        category: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> List[Dict[str, Any]]:
        """One shop's products, newest first, with quantities."""
        query = db.table("products").select().eq("shop_id", shop_id)
        products = unwrap(await self._filtered(query, text, category, min_price, max_price))
        return await self.attach_sizes(db, products)


product_service = ProductService()
