"""
Shop subscription plan and push subscription models.
"""

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from arcade_market.database import Base


class ShopSubscription(Base):
    """Billing plan of a shop. Replaced, not patched, when an admin changes it."""

    __tablename__ = "shop_subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(
        Integer, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False, index=True
    )
    plan = Column(String, nullable=False, default="free")  # free, basic, premium
    status = Column(String, nullable=False, default="active")
    start_date = Column(DateTime, default=datetime.utcnow, nullable=True)
    end_date = Column(DateTime, nullable=True)
    monthly_fee = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)

    # Relationships
    shop = relationship("Shop", back_populates="subscriptions")


class PushSubscription(Base):
    """Opaque browser push subscription stored for a shop."""

    __tablename__ = "push_subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(
        Integer, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    subscription_data = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
