"""
API endpoints for product management.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from arcade_market.core.errors import ForbiddenError, NotFoundError, unwrap
from arcade_market.data import Database
from arcade_market.dependencies import get_current_shop, get_database
from arcade_market.schemas import ProductCreate, ProductUpdate, SizeStockUpdate
from arcade_market.services.product_service import product_service, size_records

logger = logging.getLogger(__name__)

router = APIRouter()

# Shop status -> (message, code) for shops that may not list products
BLOCKED_STATUSES = {
    "pending": (
        "Your shop is pending approval. Please wait for admin approval before adding products.",
        "SHOP_PENDING",
    ),
    "closed": ("Your shop is currently closed. Please contact admin.", "SHOP_CLOSED"),
    "suspended": ("Your shop is suspended. Please contact admin.", "SHOP_SUSPENDED"),
}


@router.get("/search")
async def search_products(
    query: Optional[str] = None,
    category: Optional[str] = None,
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    db: Database = Depends(get_database),
):
    """Public product search; products of closed shops are never listed."""
    return await product_service.search(db, query, category, min_price, max_price)


@router.get("/my-products")
async def list_my_products(
    shop: Dict[str, Any] = Depends(get_current_shop),
    db: Database = Depends(get_database),
):
    return await product_service.shop_products(db, shop["id"])


@router.get("/my-products/search")
async def search_my_products(
    query: Optional[str] = None,
    category: Optional[str] = None,
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    shop: Dict[str, Any] = Depends(get_current_shop),
    db: Database = Depends(get_database),
):
    return await product_service.shop_products(
        db, shop["id"], query, category, min_price, max_price
    )


@router.post("")
async def create_product(
    product_in: ProductCreate,
    shop: Dict[str, Any] = Depends(get_current_shop),
    db: Database = Depends(get_database),
):
    """Create a product with its sizes. Only active shops may list products."""
    if shop["status"] in BLOCKED_STATUSES:
        message, code = BLOCKED_STATUSES[shop["status"]]
        raise ForbiddenError(message, code=code)

    record = product_in.model_dump(exclude={"sizes"})
    record["shop_id"] = shop["id"]
    product = unwrap(
        await db.table("products").insert(record).select("id").single(),
        "Failed to create product",
    )

    if product_in.sizes:
        result = await db.table("product_sizes").insert(size_records(product["id"], product_in.sizes))
        if result.error is not None:
            # Don't leave a product without its sizes behind
            await db.table("products").delete().eq("id", product["id"])
            unwrap(result, "Failed to add sizes")

    logger.info(f"Shop {shop['shop_number']} created product {product['id']}")
    return {"message": "Product created successfully", "product_id": product["id"]}


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    product_in: ProductUpdate,
    shop: Dict[str, Any] = Depends(get_current_shop),
    db: Database = Depends(get_database),
):
    """Update a product; a non-empty ``sizes`` list replaces all of its sizes."""
    patch = product_in.model_dump(exclude_unset=True, exclude={"sizes"})
    if patch:
        query = db.table("products").update(patch).select("id")
    else:
        query = db.table("products").select("id")
    updated = unwrap(await query.eq("id", product_id).eq("shop_id", shop["id"]))
    if not updated:
        raise NotFoundError("Product not found or not authorized")

    if product_in.sizes:
        result = await (
            db.table("product_sizes")
            .replace(size_records(product_id, product_in.sizes))
            .eq("product_id", product_id)
        )
        unwrap(result, "Failed to update sizes")

    return {"message": "Product updated successfully"}


@router.put("/{product_id}/sizes/{size}")
async def update_size_stock(
    product_id: int,
    size: str,
    stock_in: SizeStockUpdate,
    shop: Dict[str, Any] = Depends(get_current_shop),
    db: Database = Depends(get_database),
):
    """Toggle stock for one size of one of the shop's products."""
    owned = unwrap(
        await db.table("products")
        .select("id")
        .eq("id", product_id)
        .eq("shop_id", shop["id"])
        .single()
    )
    if not owned:
        raise NotFoundError("Product not found or not authorized")

    updated = unwrap(
        await db.table("product_sizes")
        .update({"in_stock": stock_in.in_stock})
        .eq("product_id", product_id)
        .eq("size", size)
        .select("id")
    )
    if not updated:
        raise NotFoundError("Size not found")
    return {"message": "Size updated successfully"}


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    shop: Dict[str, Any] = Depends(get_current_shop),
    db: Database = Depends(get_database),
):
    deleted = unwrap(
        await db.table("products")
        .delete()
        .eq("id", product_id)
        .eq("shop_id", shop["id"])
        .select("id")
    )
    if not deleted:
        raise NotFoundError("Product not found or not authorized")
    logger.info(f"Shop {shop['shop_number']} deleted product {product_id}")
    return {"message": "Product deleted successfully"}
