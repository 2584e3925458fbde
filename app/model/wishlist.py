from sqlalchemy import Column, Integer, DateTime, UniqueConstraint
from database import Base
from utils.helper import utcnow


# ---------------------------------------------------------------------------
# WISHLIST_ITEM  (user_id, food_id), newest first
# ---------------------------------------------------------------------------

class WishlistItem(Base):
    __tablename__ = "wishlist_items"

    wishlist_item_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)   # users.user_id
    food_id = Column(Integer, nullable=False)               # food_items.food_id (live lookup, no FK)
    added_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "food_id", name="uq_wishlist_items_user_food"),
    )
