"""
Order database model.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from arcade_market.database import Base


class Order(Base):
    """Customer order for one product size at one shop."""

    __tablename__ = "orders"
    __table_args__ = (
        Index("idx_order_shop_created", "shop_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(Integer, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False)
    customer_name = Column(String, nullable=False)
    customer_contact = Column(String, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    size = Column(String, nullable=False)
    status = Column(String, nullable=False, default="pending")  # pending, confirmed, completed, cancelled
    notes = Column(String, nullable=True)
    payment_reference = Column(String, nullable=True)
    payment_status = Column(String, nullable=False, default="unpaid")  # unpaid, pending, confirmed, rejected
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    shop = relationship("Shop", back_populates="orders")
