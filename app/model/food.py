from sqlalchemy import Column, Integer, String, Numeric, Boolean, Text, Float, DateTime, Index, CheckConstraint
from database import Base
from utils.helper import utcnow


# ---------------------------------------------------------------------------
# FOOD_ITEM
# ---------------------------------------------------------------------------

class FoodItem(Base):
    __tablename__ = "food_items"

    food_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String(50), nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)
    image_url = Column(String(255), nullable=True)
    is_vegetarian = Column(Boolean, nullable=False, default=False)
    preparation_time = Column(Integer, nullable=False, default=30)  # minutes
    rating = Column(Float, nullable=False, default=0.0)
    review_count = Column(Integer, nullable=False, default=0)
    discount_percent = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_food_items_category", "category"),
        CheckConstraint("price > 0", name="ck_food_items_price_gt_0"),
        CheckConstraint("rating BETWEEN 0 AND 5", name="ck_food_items_rating_0_5"),
        CheckConstraint("discount_percent BETWEEN 0 AND 100", name="ck_food_items_discount_0_100"),
    )
