import logging
from typing import Dict, List

from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from model.cart import CartItem
from model.food import FoodItem
from utils.errors import ConflictError, InvalidInputError, NotFoundError, UnavailableError
from utils.pricing import line_total, price_order, round2, subtotal_of

logger = logging.getLogger(__name__)


def _validate_quantity(quantity, allow_zero: bool = False) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidInputError("Quantity must be a whole number")
    if quantity < 0 or (quantity == 0 and not allow_zero):
        raise InvalidInputError("Quantity must be a non-negative number" if allow_zero else "Quantity must be a positive number")
    return quantity


class CartCRUD:
    """Per-user cart keyed by (user_id, food_id); quantities are always > 0."""

    def _line(self, db: Session, user_id: int, food_id: int):
        return db.query(CartItem).filter(CartItem.user_id == user_id, CartItem.food_id == food_id).first()

    def _summary(self, db: Session, user_id: int, food_id: int) -> dict:
        cart = self.get_cart(db, user_id)
        line = self._line(db, user_id, food_id)
        return {
            "food_id": food_id,
            "quantity": line.quantity if line else 0,
            "subtotal": cart["subtotal"],
            "item_count": cart["item_count"],
        }

    def add_item(self, db: Session, user_id: int, food_id: int, quantity: int = 1) -> dict:
        food = db.query(FoodItem).filter(FoodItem.food_id == food_id).first()
        if not food:
            raise NotFoundError("Food item not found")
        if not food.is_available:
            raise UnavailableError(f"{food.name} is not available")
        quantity = _validate_quantity(quantity)

        # atomic increment; insert only when no row exists yet
        for attempt in range(2):
            updated = (
                db.query(CartItem)
                .filter(CartItem.user_id == user_id, CartItem.food_id == food_id)
                .update({CartItem.quantity: CartItem.quantity + quantity}, synchronize_session=False)
            )
            if updated:
                db.commit()
                break
            try:
                db.add(CartItem(user_id=user_id, food_id=food_id, quantity=quantity))
                db.commit()
                break
            except IntegrityError:
                # a concurrent request inserted the row first; retry as an increment
                db.rollback()
                if attempt:
                    raise ConflictError("Cart changed concurrently, please retry")
        logger.info("cart.add user=%s food=%s qty=%s", user_id, food_id, quantity)
        return self._summary(db, user_id, food_id)

    def remove_item(self, db: Session, user_id: int, food_id: int) -> dict:
        deleted = (
            db.query(CartItem)
            .filter(CartItem.user_id == user_id, CartItem.food_id == food_id)
            .delete(synchronize_session=False)
        )
        if not deleted:
            db.rollback()
            raise NotFoundError("Item not found in cart")
        db.commit()
        return self._summary(db, user_id, food_id)

    def set_quantity(self, db: Session, user_id: int, food_id: int, quantity: int) -> dict:
        quantity = _validate_quantity(quantity, allow_zero=True)
        if quantity == 0:
            return self.remove_item(db, user_id, food_id)
        updated = (
            db.query(CartItem)
            .filter(CartItem.user_id == user_id, CartItem.food_id == food_id)
            .update({CartItem.quantity: quantity}, synchronize_session=False)
        )
        if not updated:
            db.rollback()
            raise NotFoundError("Item not found in cart")
        db.commit()
        return self._summary(db, user_id, food_id)

    def entries(self, db: Session, user_id: int, for_update: bool = False) -> List[CartItem]:
        query = db.query(CartItem).filter(CartItem.user_id == user_id).order_by(CartItem.cart_item_id.asc())
        if for_update:
            query = query.with_for_update()
        return query.all()

    def get_cart(self, db: Session, user_id: int) -> dict:
        entries = self.entries(db, user_id)
        if not entries:
            return {"items": [], "missing": [], "subtotal": 0.0, "item_count": 0}

        foods: Dict[int, FoodItem] = {
            f.food_id: f
            for f in db.query(FoodItem).filter(FoodItem.food_id.in_([e.food_id for e in entries])).all()
        }
        items, missing, priced = [], [], []
        for entry in entries:
            food = foods.get(entry.food_id)
            if food is None:
                missing.append(entry.food_id)
                continue
            priced.append((food.price, entry.quantity))
            items.append({
                "food_id": food.food_id,
                "name": food.name,
                "price": float(food.price),
                "quantity": entry.quantity,
                "image_url": food.image_url,
                "category": food.category,
                "is_available": food.is_available,
                "item_total": float(round2(line_total(food.price, entry.quantity))),
            })
        return {
            "items": items,
            "missing": missing,
            "subtotal": float(subtotal_of(priced)),
            "item_count": len(entries),
        }

    def summary(self, db: Session, user_id: int) -> dict:
        cart = self.get_cart(db, user_id)
        breakdown = price_order(cart["subtotal"])
        return {"item_count": cart["item_count"], **breakdown.as_dict()}

    def clear(self, db: Session, user_id: int) -> int:
        deleted = db.query(CartItem).filter(CartItem.user_id == user_id).delete(synchronize_session=False)
        db.commit()
        return deleted

    def consume(self, db: Session, user_id: int, entries: List[CartItem]) -> None:
        """
        Delete exactly the entries a checkout priced, inside the caller's transaction.

        Each delete is conditional on the quantity the checkout read; if any row
        vanished or changed meanwhile another request got there first.
        """
        removed = 0
        for entry in entries:
            removed += (
                db.query(CartItem)
                .filter(and_(
                    CartItem.cart_item_id == entry.cart_item_id,
                    CartItem.user_id == user_id,
                    CartItem.quantity == entry.quantity,
                ))
                .delete(synchronize_session=False)
            )
        if removed != len(entries):
            raise ConflictError("Cart changed while placing the order, please review your cart and retry")


cart_crud = CartCRUD()
