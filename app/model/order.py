from __future__ import annotations

from enum import Enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from database import Base
from utils.helper import utcnow


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class OrderStatusEnum(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PREPARING = "PREPARING"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class PaymentMethodEnum(str, Enum):
    COD = "COD"
    CARD = "CARD"


class StatusChangedByEnum(str, Enum):
    USER = "USER"
    SYSTEM = "SYSTEM"
    ADMIN = "ADMIN"
    PAYMENT_SERVICE = "PAYMENT_SERVICE"


# ---------------------------------------------------------------------------
# ORDER
# ---------------------------------------------------------------------------

class Order(Base):
    __tablename__ = "orders"

    order_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)   # users.user_id
    order_reference = Column(String(20), nullable=False, unique=True, index=True)
    subtotal = Column(Numeric(10, 2), nullable=False)
    tax = Column(Numeric(10, 2), nullable=False)
    delivery_fee = Column(Numeric(10, 2), nullable=False)
    discount = Column(Numeric(10, 2), nullable=False, default=0)
    amount = Column(Numeric(10, 2), nullable=False)
    promo_code = Column(String(50), nullable=True)
    address = Column(JSON, nullable=False)   # snapshot at order time
    payment_method = Column(SAEnum(PaymentMethodEnum, name="payment_method_enum"), nullable=False)
    status = Column(SAEnum(OrderStatusEnum, name="order_status_enum"), nullable=False, default=OrderStatusEnum.PENDING)
    payment = Column(Boolean, nullable=False, default=False)
    special_instructions = Column(Text, nullable=True)
    rating = Column(Integer, nullable=True)
    review = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    # Relations
    items = relationship("OrderItem", back_populates="order", cascade="all,delete-orphan", order_by="OrderItem.order_item_id")
    status_logs = relationship("OrderStatusLog", back_populates="order", cascade="all,delete-orphan", order_by="OrderStatusLog.status_log_id")

    __table_args__ = (
        CheckConstraint("rating IS NULL OR rating BETWEEN 1 AND 5", name="ck_orders_rating_1_5"),
        Index("ix_orders_user_id_created_at", "user_id", "created_at"),
    )


# ---------------------------------------------------------------------------
# ORDER_ITEM (frozen snapshot of the food item at order time)
# ---------------------------------------------------------------------------

class OrderItem(Base):
    __tablename__ = "order_items"

    order_item_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.order_id", ondelete="CASCADE"), nullable=False)
    food_id = Column(Integer, nullable=False, index=True)    # food_items.food_id (no FK, history survives deletes)
    name = Column(String(100), nullable=False)
    category = Column(String(50), nullable=True)
    image_url = Column(String(255), nullable=True)
    unit_price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)

    order = relationship("Order", back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_gt_0"),
        Index("ix_order_items_order_id", "order_id"),
    )


# ---------------------------------------------------------------------------
# order_status (append-only history)
# ---------------------------------------------------------------------------

class OrderStatusLog(Base):
    __tablename__ = "order_status_logs"

    status_log_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.order_id", ondelete="CASCADE"), nullable=False)
    from_status = Column(SAEnum(OrderStatusEnum, name="order_status_enum"), nullable=True)
    to_status = Column(SAEnum(OrderStatusEnum, name="order_status_enum"), nullable=False)
    changed_at = Column(DateTime, default=utcnow, nullable=False)
    changed_by = Column(SAEnum(StatusChangedByEnum, name="status_changed_by_enum"), nullable=True)
    message = Column(Text, nullable=True)

    order = relationship("Order", back_populates="status_logs")

    __table_args__ = (
        Index("ix_order_status_logs_order_id", "order_id"),
        Index("ix_order_status_logs_changed_at", "changed_at"),
    )
