import logging
import uuid
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from crud.base import CRUDBase
from crud.cart_crud import cart_crud
from crud.promo_crud import promo_crud
from model.cart import CartItem
from model.food import FoodItem
from model.order import (
    Order,
    OrderItem,
    OrderStatusEnum,
    OrderStatusLog,
    PaymentMethodEnum,
    StatusChangedByEnum,
)
from schemas.order_schema import OrderPlace, OrderStatusUpdate
from utils.auth.jwt_bearer import Principal
from utils.errors import (
    AppError,
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    UnavailableError,
)
from utils.helper import utcnow
from utils.order_status import STATUS_LABELS, ensure_cancellable, ensure_rateable, ensure_transition, initial_status
from utils.pricing import PriceBreakdown, price_order, subtotal_of

logger = logging.getLogger(__name__)


def _log_order_status(db: Session, order: Order, from_status: Optional[OrderStatusEnum], to_status: OrderStatusEnum, changed_by: StatusChangedByEnum, message: Optional[str] = None):
    # Helper: append a status log to the current transaction; caller should commit
    log = OrderStatusLog(
        from_status=from_status,
        to_status=to_status,
        changed_by=changed_by,
        changed_at=utcnow(),
        message=message,
    )
    order.status_logs.append(log)
    db.add(log)


def _new_reference() -> str:
    return "ORD-" + uuid.uuid4().hex[:8].upper()


class OrderCRUD(CRUDBase[Order, OrderPlace, OrderStatusUpdate]):

    # ---------------- read ----------------
    def get_for(self, db: Session, order_id: int, principal: Principal) -> Order:
        order = self.get(db, order_id)
        if not principal.can_access(order.user_id):
            raise ForbiddenError("Unauthorized access to this order")
        return order

    def list_for_user(self, db: Session, user_id: int, skip: int = 0, limit: int = 10, status: Optional[str] = None) -> Tuple[List[Order], int]:
        return self.get_page(
            db, skip=skip, limit=limit,
            filters={"user_id": user_id, "status": status},
            order_by=Order.created_at.desc(),
        )

    def list_all(self, db: Session, skip: int = 0, limit: int = 10, status: Optional[str] = None, user_id: Optional[int] = None) -> Tuple[List[Order], int]:
        return self.get_page(
            db, skip=skip, limit=limit,
            filters={"user_id": user_id, "status": status},
            order_by=Order.created_at.desc(),
        )

    def tracking(self, db: Session, order_id: int, principal: Principal) -> dict:
        order = self.get_for(db, order_id, principal)
        logs = sorted(order.status_logs, key=lambda l: (l.changed_at, l.status_log_id), reverse=True)
        return {
            "order_id": order.order_id,
            "order_reference": order.order_reference,
            "current_status": order.status,
            "payment": order.payment,
            "tracking_updates": [
                {
                    "status": l.to_status,
                    "timestamp": l.changed_at,
                    "message": l.message,
                    "changed_by": l.changed_by,
                }
                for l in logs
            ],
        }

    # ---------------- placement ----------------
    def _check_items_match(self, entries: List[CartItem], data: OrderPlace) -> None:
        if data.items is None:
            return
        requested = {}
        for line in data.items:
            requested[line.food_id] = requested.get(line.food_id, 0) + line.quantity
        in_cart = {e.food_id: e.quantity for e in entries}
        if requested != in_cart:
            raise ConflictError("Order items do not match your cart, please refresh your cart and retry")

    def place_order(self, db: Session, user_id: int, data: OrderPlace) -> Tuple[Order, PriceBreakdown]:
        """
        Price the user's cart against current catalog data and persist the order.

        Everything happens in one transaction: either the order exists with its
        frozen line items and the cart is emptied, or nothing changed.
        """
        try:
            entries = cart_crud.entries(db, user_id, for_update=True)
            if not entries:
                raise InvalidInputError("Order must contain at least one item")
            self._check_items_match(entries, data)

            foods = {
                f.food_id: f
                for f in db.query(FoodItem).filter(FoodItem.food_id.in_([e.food_id for e in entries])).all()
            }
            for entry in entries:
                food = foods.get(entry.food_id)
                if food is None:
                    raise NotFoundError(f"Food item {entry.food_id} not found", errors={"food_id": entry.food_id})
                if not food.is_available:
                    raise UnavailableError(f"Food item {food.name} is not available", errors={"food_id": entry.food_id})

            subtotal = subtotal_of((foods[e.food_id].price, e.quantity) for e in entries)

            discount = 0
            promo_code = None
            if data.promo_code:
                quote = promo_crud.validate(db, data.promo_code, user_id, subtotal)
                discount = quote.discount_amount
                promo_code = quote.code
            breakdown = price_order(subtotal, discount)

            status = initial_status(data.payment_method)
            now = utcnow()
            order = Order(
                user_id=user_id,
                order_reference=_new_reference(),
                subtotal=breakdown.subtotal,
                tax=breakdown.tax,
                delivery_fee=breakdown.delivery_fee,
                discount=breakdown.discount,
                amount=breakdown.total,
                promo_code=promo_code,
                address=data.address.model_dump(),
                payment_method=PaymentMethodEnum(data.payment_method.value),
                status=status,
                payment=False,
                special_instructions=data.special_instructions,
                created_at=now,
                updated_at=now,
            )
            for entry in entries:
                food = foods[entry.food_id]
                order.items.append(OrderItem(
                    food_id=food.food_id,
                    name=food.name,
                    category=food.category,
                    image_url=food.image_url,
                    unit_price=food.price,
                    quantity=entry.quantity,
                ))
            db.add(order)
            _log_order_status(
                db, order, None, status, StatusChangedByEnum.SYSTEM,
                "Order placed, awaiting payment" if status == OrderStatusEnum.PENDING else "Order received and confirmed",
            )
            db.flush()

            cart_crud.consume(db, user_id, entries)

            if promo_code and status == OrderStatusEnum.CONFIRMED:
                promo_crud.apply(db, promo_code, user_id, order_id=order.order_id, commit=False)

            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(order)
        logger.info(
            "order.placed order=%s user=%s amount=%s status=%s method=%s",
            order.order_id, user_id, order.amount, order.status.value, order.payment_method.value,
        )
        return order, breakdown

    # ---------------- status machine ----------------
    def _transition(self, db: Session, order: Order, target: OrderStatusEnum, changed_by: StatusChangedByEnum, message: Optional[str] = None) -> None:
        current = OrderStatusEnum(order.status)
        ensure_transition(current, target)
        order.status = target
        order.updated_at = utcnow()
        _log_order_status(db, order, current, target, changed_by, message or f"Order status updated to {STATUS_LABELS[target]}")

    def _redeem_promo(self, db: Session, order: Order) -> None:
        """Redeem the order's promo after a late confirmation; the order stands either way."""
        if not order.promo_code:
            return
        try:
            promo_crud.apply(db, order.promo_code, order.user_id, order_id=order.order_id)
        except AppError as e:
            logger.warning("promo.redeem_failed order=%s code=%s: %s", order.order_id, order.promo_code, e.detail)

    def verify_payment(self, db: Session, order_id: int, success: bool, principal: Principal) -> Tuple[Order, bool]:
        """
        Apply a payment callback. Returns ``(order, confirmed_now)``.

        A failed payment leaves the order PENDING with ``payment`` false. Once
        the order has left PENDING a failure callback changes nothing.
        """
        order = self.get_for(db, order_id, principal)
        if PaymentMethodEnum(order.payment_method) != PaymentMethodEnum.CARD:
            raise InvalidStateError("Order is not awaiting card payment")

        if not success:
            if order.payment or order.status != OrderStatusEnum.PENDING:
                raise InvalidStateError("Payment for this order is already settled")
            order.payment = False
            order.updated_at = utcnow()
            db.commit()
            db.refresh(order)
            logger.info("order.payment_failed order=%s", order.order_id)
            return order, False

        if order.payment and order.status != OrderStatusEnum.PENDING:
            # duplicate callback
            return order, False

        self._transition(db, order, OrderStatusEnum.CONFIRMED, StatusChangedByEnum.PAYMENT_SERVICE, "Payment succeeded")
        order.payment = True
        db.commit()
        db.refresh(order)
        self._redeem_promo(db, order)
        logger.info("order.payment_confirmed order=%s", order.order_id)
        return order, True

    def cancel(self, db: Session, order_id: int, principal: Principal, reason: Optional[str] = None) -> Order:
        order = self.get_for(db, order_id, principal)
        ensure_cancellable(order.status)
        by = StatusChangedByEnum.ADMIN if principal.is_admin and principal.user_id != order.user_id else StatusChangedByEnum.USER
        self._transition(db, order, OrderStatusEnum.CANCELLED, by, reason or "Order cancelled by user")
        db.commit()
        db.refresh(order)
        logger.info("order.cancelled order=%s by=%s", order.order_id, by.value)
        return order

    def update_status(self, db: Session, order_id: int, obj_in: OrderStatusUpdate) -> Order:
        order = self.get(db, order_id)
        target = OrderStatusEnum(obj_in.status.value)
        if target == OrderStatusEnum.CANCELLED:
            ensure_cancellable(order.status)
        was_pending = order.status == OrderStatusEnum.PENDING
        self._transition(db, order, target, StatusChangedByEnum.ADMIN, obj_in.message)
        db.commit()
        db.refresh(order)
        if was_pending and target == OrderStatusEnum.CONFIRMED:
            self._redeem_promo(db, order)
        logger.info("order.status order=%s status=%s", order.order_id, target.value)
        return order

    def rate(self, db: Session, order_id: int, principal: Principal, rating: int, review: Optional[str] = None) -> Order:
        order = self.get_for(db, order_id, principal)
        if order.user_id != principal.user_id:
            raise ForbiddenError("Only the customer can rate this order")
        ensure_rateable(order.status)
        order.rating = rating
        if review:
            order.review = review.strip()
        order.updated_at = utcnow()
        db.commit()
        db.refresh(order)
        return order


order_crud = OrderCRUD(Order, id_field="order_id", label="Order")
