from __future__ import annotations

from enum import Enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from database import Base
from utils.helper import utcnow


class DiscountTypeEnum(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


# ---------------------------------------------------------------------------
# PROMO_CODE
# ---------------------------------------------------------------------------

class PromoCode(Base):
    __tablename__ = "promo_codes"

    promo_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    code = Column(String(50), nullable=False, unique=True, index=True)  # stored upper-case
    description = Column(Text, nullable=True)
    discount_type = Column(SAEnum(DiscountTypeEnum, name="discount_type_enum", values_callable=lambda e: [m.value for m in e]), nullable=False)
    discount_value = Column(Numeric(10, 2), nullable=False)
    min_order_amount = Column(Numeric(10, 2), nullable=False, default=0)
    max_discount = Column(Numeric(10, 2), nullable=True)
    usage_limit = Column(Integer, nullable=True)
    usage_count = Column(Integer, nullable=False, default=0)
    valid_from = Column(DateTime, nullable=True)
    valid_until = Column(DateTime, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    redemptions = relationship("PromoRedemption", back_populates="promo", cascade="all,delete-orphan")

    __table_args__ = (
        CheckConstraint("discount_value > 0", name="ck_promo_codes_value_gt_0"),
        CheckConstraint("usage_limit IS NULL OR usage_count <= usage_limit", name="ck_promo_codes_usage_within_limit"),
    )


# ---------------------------------------------------------------------------
# PROMO_REDEMPTION  (one row per user per code)
# ---------------------------------------------------------------------------

class PromoRedemption(Base):
    __tablename__ = "promo_redemptions"

    redemption_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    promo_id = Column(Integer, ForeignKey("promo_codes.promo_id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, nullable=False, index=True)   # users.user_id
    order_id = Column(Integer, nullable=True)               # orders.order_id, when redeemed by an order
    redeemed_at = Column(DateTime, default=utcnow, nullable=False)

    promo = relationship("PromoCode", back_populates="redemptions")

    __table_args__ = (
        UniqueConstraint("promo_id", "user_id", name="uq_promo_redemptions_promo_user"),
    )
