from sqlalchemy import Column, Integer, DateTime, UniqueConstraint, CheckConstraint, Index
from database import Base
from utils.helper import utcnow


# ---------------------------------------------------------------------------
# CART_ITEM  (user_id, food_id) -> quantity
# ---------------------------------------------------------------------------

class CartItem(Base):
    __tablename__ = "cart_items"

    cart_item_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)   # users.user_id
    food_id = Column(Integer, nullable=False)               # food_items.food_id (live lookup, no FK)
    quantity = Column(Integer, nullable=False)
    added_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "food_id", name="uq_cart_items_user_food"),
        CheckConstraint("quantity > 0", name="ck_cart_items_quantity_gt_0"),
        Index("ix_cart_items_user_id_food_id", "user_id", "food_id"),
    )
