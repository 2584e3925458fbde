from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from crud.base import CRUDBase
from model.food import FoodItem
from model.review import Review
from schemas.food_schema import FoodItemCreate, FoodItemUpdate

SORT_OPTIONS = {
    "price": FoodItem.price.asc(),
    "-price": FoodItem.price.desc(),
    "rating": FoodItem.rating.asc(),
    "-rating": FoodItem.rating.desc(),
    "newest": FoodItem.created_at.desc(),
}


class FoodItemCRUD(CRUDBase[FoodItem, FoodItemCreate, FoodItemUpdate]):
    def search(
        self,
        db: Session,
        skip: int = 0,
        limit: int = 10,
        filters: Optional[dict] = None,
        search: str = "",
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        sort: str = "newest",
    ) -> Tuple[List[FoodItem], int]:
        query = self.apply_filters(db.query(FoodItem), filters)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(FoodItem.name.ilike(pattern), FoodItem.description.ilike(pattern)))
        if min_price is not None:
            query = query.filter(FoodItem.price >= min_price)
        if max_price is not None:
            query = query.filter(FoodItem.price <= max_price)
        total = query.count()
        order = SORT_OPTIONS.get(sort, SORT_OPTIONS["newest"])
        items = query.order_by(order, FoodItem.food_id.asc()).offset(skip).limit(limit).all()
        return items, total

    def categories(self, db: Session) -> List[str]:
        rows = db.query(FoodItem.category).distinct().order_by(FoodItem.category.asc()).all()
        return [r[0] for r in rows]

    def top_rated(self, db: Session, limit: int = 10) -> List[FoodItem]:
        return (
            db.query(FoodItem)
            .filter(FoodItem.rating > 0)
            .order_by(FoodItem.rating.desc(), FoodItem.review_count.desc())
            .limit(limit)
            .all()
        )

    def set_availability(self, db: Session, food_id: int, is_available: bool) -> FoodItem:
        food = self.get(db, food_id)
        food.is_available = is_available
        db.commit()
        db.refresh(food)
        return food

    def recalculate_rating(self, db: Session, food_id: int) -> None:
        """Mean of the food's reviews, one decimal; caller commits."""
        food = self.get_or_none(db, food_id)
        if not food:
            return
        avg, count = db.query(func.avg(Review.rating), func.count(Review.review_id)).filter(Review.food_id == food_id).one()
        food.review_count = int(count or 0)
        food.rating = round(float(avg), 1) if count else 0.0
        db.add(food)


food_item_crud = FoodItemCRUD(FoodItem, id_field="food_id", label="Food item")
