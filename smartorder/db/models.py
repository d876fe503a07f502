"""Database models."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Numeric
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class Product(Base):
    """Catalog product model."""

    __tablename__ = "products"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False, index=True)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    category = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    image_url = Column(String, nullable=True)
    ai_hint = Column(String, nullable=True)
    display_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Order(Base):
    """Order model."""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    status = Column(String, default="pending", nullable=False)  # pending, confirmed, paid, cancelled
    payment_method = Column(String, nullable=True)
    payment_intent_id = Column(String, nullable=True, index=True)
    total_amount = Column(Numeric(10, 2), nullable=False, default=0)
    raw_text = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
    )


class OrderItem(Base):
    """Order line model."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    product_id = Column(String, nullable=False)
    name = Column(String, nullable=False)
    quantity = Column(Integer, default=1, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    special_requests = Column(Text, nullable=True)
    image_url = Column(String, nullable=True)
    ai_hint = Column(String, nullable=True)

    # Relationships
    order = relationship("Order", back_populates="items")
