"""
Product and ProductSize database models.
"""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import relationship

from arcade_market.database import Base


class Product(Base):
    """Product listed by a shop."""

    __tablename__ = "products"
    __table_args__ = (
        Index("idx_product_shop", "shop_id"),
        Index("idx_product_category", "category"),
    )

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(Integer, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    image_url = Column(String, nullable=True)
    public_id = Column(String, nullable=True)  # hosted asset id
    category = Column(String, nullable=False, default="shoes")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    shop = relationship("Shop", back_populates="products")
    sizes = relationship("ProductSize", back_populates="product", passive_deletes=True)


class ProductSize(Base):
    """Size/stock variant of a product. Replaced wholesale on product update."""

    __tablename__ = "product_sizes"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(
        Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    size = Column(String, nullable=False)
    in_stock = Column(Boolean, nullable=False, default=True)
    quantity = Column(Integer, nullable=False, default=0)

    # Relationships
    product = relationship("Product", back_populates="sizes")
