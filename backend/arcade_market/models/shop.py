"""
Shop and Admin database models.
"""

from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from arcade_market.database import Base


class Shop(Base):
    """A stall in the arcade; the tenant that owns products and orders."""

    __tablename__ = "shops"

    id = Column(Integer, primary_key=True, index=True)
    shop_number = Column(String, nullable=False, unique=True)
    shop_name = Column(String, nullable=False)
    contact = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)
    password = Column(String, nullable=False)  # bcrypt hash
    status = Column(String, nullable=False, default="pending")  # pending, active, suspended, closed
    till_number = Column(String, nullable=True)
    payment_provider = Column(String, nullable=True)
    payment_notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    products = relationship("Product", back_populates="shop", passive_deletes=True)
    orders = relationship("Order", back_populates="shop", passive_deletes=True)
    subscriptions = relationship("ShopSubscription", back_populates="shop", passive_deletes=True)


class Admin(Base):
    """Marketplace administrator."""

    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, nullable=False, unique=True)
    email = Column(String, nullable=False, unique=True)
    password = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
