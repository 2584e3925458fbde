from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from crud.base import CRUDBase
from crud.food_item_crud import food_item_crud
from model.order import Order
from model.review import Review
from schemas.review_schema import ReviewCreate, ReviewUpdate
from utils.errors import ConflictError, ForbiddenError, NotFoundError
from utils.order_status import ensure_rateable


class ReviewCRUD(CRUDBase[Review, ReviewCreate, ReviewUpdate]):

    def create_review(self, db: Session, user_id: int, obj_in: ReviewCreate) -> Review:
        food_item_crud.get(db, obj_in.food_id)

        if obj_in.order_id is not None:
            order = db.query(Order).filter(Order.order_id == obj_in.order_id).first()
            if not order:
                raise NotFoundError("Order not found")
            if order.user_id != user_id:
                raise ForbiddenError("Unauthorized access to this order")
            ensure_rateable(order.status)

        existing = db.query(Review).filter(Review.user_id == user_id, Review.food_id == obj_in.food_id).first()
        if existing:
            raise ConflictError("You have already reviewed this food item")

        review = Review(
            user_id=user_id,
            food_id=obj_in.food_id,
            order_id=obj_in.order_id,
            rating=obj_in.rating,
            title=obj_in.title.strip(),
            comment=obj_in.comment.strip() if obj_in.comment else "",
            images=list(obj_in.images),
            verified=obj_in.order_id is not None,
        )
        db.add(review)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            raise ConflictError("You have already reviewed this food item")
        food_item_crud.recalculate_rating(db, obj_in.food_id)
        db.commit()
        db.refresh(review)
        return review

    def list_for_food(self, db: Session, food_id: int, skip: int = 0, limit: int = 10) -> Tuple[List[Review], int]:
        food_item_crud.get(db, food_id)
        return self.get_page(db, skip=skip, limit=limit, filters={"food_id": food_id}, order_by=Review.created_at.desc())

    def list_for_user(self, db: Session, user_id: int, skip: int = 0, limit: int = 10) -> Tuple[List[Review], int]:
        return self.get_page(db, skip=skip, limit=limit, filters={"user_id": user_id}, order_by=Review.created_at.desc())

    def _owned(self, db: Session, review_id: int, user_id: int) -> Review:
        review = self.get(db, review_id)
        if review.user_id != user_id:
            raise ForbiddenError("Unauthorized access")
        return review

    def update_review(self, db: Session, review_id: int, user_id: int, obj_in: ReviewUpdate) -> Review:
        review = self._owned(db, review_id, user_id)
        data = obj_in.model_dump(exclude_unset=True)
        if data.get("title"):
            review.title = data["title"].strip()
        if "comment" in data:
            review.comment = (data["comment"] or "").strip()
        if data.get("images") is not None:
            review.images = list(data["images"])
        if data.get("rating") is not None:
            review.rating = data["rating"]
            db.flush()
            food_item_crud.recalculate_rating(db, review.food_id)
        db.commit()
        db.refresh(review)
        return review

    def delete_review(self, db: Session, review_id: int, user_id: int) -> int:
        review = self._owned(db, review_id, user_id)
        food_id = review.food_id
        db.delete(review)
        db.flush()
        food_item_crud.recalculate_rating(db, food_id)
        db.commit()
        return review_id

    def mark_helpful(self, db: Session, review_id: int, helpful: bool = True) -> Review:
        review = self.get(db, review_id)
        column = Review.helpful if helpful else Review.unhelpful
        db.query(Review).filter(Review.review_id == review_id).update({column: column + 1}, synchronize_session=False)
        db.commit()
        db.refresh(review)
        return review


review_crud = ReviewCRUD(Review, id_field="review_id", label="Review")
