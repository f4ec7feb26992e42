"""
API endpoints for customer orders.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from arcade_market.core.errors import BadRequestError, NotFoundError, unwrap
from arcade_market.data import Database
from arcade_market.dependencies import get_current_shop, get_database, get_notifier
from arcade_market.schemas import OrderCreate, OrderStatusUpdate, PaymentUpdate
from arcade_market.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter()

FOREIGN_KEY_VIOLATION = "23503"


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(
    order_in: OrderCreate,
    db: Database = Depends(get_database),
    notifier: NotificationService = Depends(get_notifier),
):
    """
    Place an order (public). The size is recorded as requested; stock and
    product ownership are left for the shop to sort out.
    """
    record = order_in.model_dump()
    record["status"] = "pending"
    record["payment_status"] = "pending" if order_in.payment_reference else "unpaid"

    result = await db.table("orders").insert(record).select("id").single()
    if result.error is not None and result.error.code == FOREIGN_KEY_VIOLATION:
        raise BadRequestError("Shop or product does not exist")
    order = unwrap(result, "Failed to create order")

    await notifier.notify_shop(
        db,
        order_in.shop_id,
        "New Order Received!",
        f"You have a new order from {order_in.customer_name}",
    )
    logger.info(f"Order {order['id']} placed with shop {order_in.shop_id}")
    return {"message": "Order created successfully", "order_id": order["id"]}


@router.get("/my-orders")
async def list_my_orders(
    shop: Dict[str, Any] = Depends(get_current_shop),
    db: Database = Depends(get_database),
):
    """The shop's orders, newest first, with product name and price."""
    orders = unwrap(
        await db.table("orders")
        .select()
        .eq("shop_id", shop["id"])
        .order("created_at", ascending=False)
    )
    if not orders:
        return []

    product_ids = sorted({order["product_id"] for order in orders})
    products = unwrap(
        await db.table("products").select("id, name, price").in_("id", product_ids)
    )
    products_by_id = {product["id"]: product for product in products}

    listed = []
    for order in orders:
        product = products_by_id.get(order["product_id"], {})
        listed.append(
            {
                "id": order["id"],
                "customer_name": order["customer_name"],
                "customer_contact": order["customer_contact"],
                "product_id": order["product_id"],
                "product_name": product.get("name"),
                "price": product.get("price"),
                "size": order["size"],
                "status": order["status"],
                "notes": order["notes"],
                "payment_reference": order["payment_reference"],
                "payment_status": order["payment_status"],
                "created_at": order["created_at"],
                "shop_name": shop["shop_name"],
            }
        )
    return listed


async def _update_own_order(db: Database, order_id: int, shop_id: int, patch: Dict[str, Any]) -> None:
    updated = unwrap(
        await db.table("orders")
        .update(patch)
        .eq("id", order_id)
        .eq("shop_id", shop_id)
        .select("id")
    )
    if not updated:
        raise NotFoundError("Order not found or not authorized")


@router.put("/{order_id}/status")
async def update_order_status(
    order_id: int,
    status_in: OrderStatusUpdate,
    shop: Dict[str, Any] = Depends(get_current_shop),
    db: Database = Depends(get_database),
):
    await _update_own_order(db, order_id, shop["id"], {"status": status_in.status})
    return {"message": "Order status updated successfully"}


@router.put("/{order_id}/payment")
async def update_payment(
    order_id: int,
    payment_in: PaymentUpdate,
    shop: Dict[str, Any] = Depends(get_current_shop),
    db: Database = Depends(get_database),
):
    """Confirm or reject the customer's payment."""
    patch = {"payment_status": payment_in.payment_status}
    if payment_in.payment_reference:
        patch["payment_reference"] = payment_in.payment_reference
    await _update_own_order(db, order_id, shop["id"], patch)
    return {"message": f"Payment {payment_in.payment_status}"}
