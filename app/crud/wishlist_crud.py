import logging
from typing import List, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from model.food import FoodItem
from model.wishlist import WishlistItem
from utils.errors import NotFoundError

logger = logging.getLogger(__name__)


class WishlistCRUD:
    """Saved foods per user. Entries whose food left the catalog are skipped on read."""

    def get_wishlist(self, db: Session, user_id: int) -> List[Tuple[FoodItem, WishlistItem]]:
        return (
            db.query(FoodItem, WishlistItem)
            .join(WishlistItem, WishlistItem.food_id == FoodItem.food_id)
            .filter(WishlistItem.user_id == user_id)
            .order_by(WishlistItem.added_at.desc(), WishlistItem.wishlist_item_id.desc())
            .all()
        )

    def _exists(self, db: Session, user_id: int, food_id: int) -> bool:
        return (
            db.query(WishlistItem.wishlist_item_id)
            .filter(WishlistItem.user_id == user_id, WishlistItem.food_id == food_id)
            .first()
            is not None
        )

    def add(self, db: Session, user_id: int, food_id: int) -> bool:
        """Returns True when the food was newly saved, False when it was already there."""
        if not db.query(FoodItem.food_id).filter(FoodItem.food_id == food_id).first():
            raise NotFoundError("Food item not found")
        if self._exists(db, user_id, food_id):
            return False
        try:
            db.add(WishlistItem(user_id=user_id, food_id=food_id))
            db.commit()
        except IntegrityError:
            # same food saved by a concurrent request
            db.rollback()
            return False
        logger.info("wishlist.added user=%s food=%s", user_id, food_id)
        return True

    def remove(self, db: Session, user_id: int, food_id: int) -> int:
        deleted = (
            db.query(WishlistItem)
            .filter(WishlistItem.user_id == user_id, WishlistItem.food_id == food_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted

    def clear(self, db: Session, user_id: int) -> int:
        deleted = db.query(WishlistItem).filter(WishlistItem.user_id == user_id).delete(synchronize_session=False)
        db.commit()
        return deleted


wishlist_crud = WishlistCRUD()
