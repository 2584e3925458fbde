from decimal import Decimal

import pytest

from conftest import ADDRESS, make_food, make_promo, make_user, principal_for
from crud.cart_crud import cart_crud
from crud.order_crud import order_crud
from crud.promo_crud import promo_crud
from model.order import Order, OrderStatusEnum, StatusChangedByEnum
from model.promo import DiscountTypeEnum
from schemas import OrderStatus, PaymentMethod
from schemas.order_schema import OrderPlace, OrderStatusUpdate
from utils.errors import (
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
    PromoRejectedError,
    UnavailableError,
)


def _place(db, user, method=PaymentMethod.COD, **kw):
    data = OrderPlace(address=ADDRESS, payment_method=method, **kw)
    return order_crud.place_order(db, user.user_id, data)


def _advance(db, order_id, *statuses):
    for s in statuses:
        order_crud.update_status(db, order_id, OrderStatusUpdate(status=s))


@pytest.fixture
def food(db):
    return make_food(db, price="100", name="Paneer Tikka", category="Starters")


def test_cash_order_is_priced_and_confirmed(db, user, food):
    cart_crud.add_item(db, user.user_id, food.food_id, 2)
    order, breakdown = _place(db, user)

    assert breakdown.subtotal == Decimal("200.00")
    assert breakdown.tax == Decimal("10.00")
    assert breakdown.delivery_fee == Decimal("50")
    assert order.amount == Decimal("260.00")
    assert order.status == OrderStatusEnum.CONFIRMED
    assert order.payment is False
    assert order.order_reference.startswith("ORD-")
    assert [(i.name, i.quantity, i.unit_price) for i in order.items] == [("Paneer Tikka", 2, Decimal("100.00"))]
    assert cart_crud.entries(db, user.user_id) == []
    assert [log.changed_by for log in order.status_logs] == [StatusChangedByEnum.SYSTEM]


def test_flat_promo_reduces_total_and_is_redeemed(db, user, food):
    make_promo(db, code="FLAT50", discount_type=DiscountTypeEnum.FIXED, value="50", min_order_amount=Decimal("100"))
    cart_crud.add_item(db, user.user_id, food.food_id, 2)

    order, breakdown = _place(db, user, promo_code="flat50")

    assert breakdown.discount == Decimal("50.00")
    assert order.amount == Decimal("210.00")
    assert order.promo_code == "FLAT50"
    assert promo_crud.get_by_code(db, "FLAT50").usage_count == 1


def test_rejected_promo_aborts_placement(db, user, food):
    make_promo(db, code="BIG", min_order_amount=Decimal("1000"))
    cart_crud.add_item(db, user.user_id, food.food_id, 1)

    with pytest.raises(PromoRejectedError):
        _place(db, user, promo_code="BIG")
    assert db.query(Order).count() == 0
    assert len(cart_crud.entries(db, user.user_id)) == 1


def test_empty_cart_cannot_be_placed(db, user):
    with pytest.raises(InvalidInputError):
        _place(db, user)


def test_deleted_food_fails_placement_and_keeps_cart(db, user, food):
    cart_crud.add_item(db, user.user_id, food.food_id, 1)
    db.delete(food)
    db.commit()

    with pytest.raises(NotFoundError):
        _place(db, user)
    assert db.query(Order).count() == 0
    assert len(cart_crud.entries(db, user.user_id)) == 1


def test_unavailable_food_fails_placement(db, user, food):
    other = make_food(db, price="30")
    cart_crud.add_item(db, user.user_id, food.food_id, 1)
    cart_crud.add_item(db, user.user_id, other.food_id, 1)
    other.is_available = False
    db.commit()

    with pytest.raises(UnavailableError):
        _place(db, user)
    assert db.query(Order).count() == 0
    assert len(cart_crud.entries(db, user.user_id)) == 2


def test_current_price_wins_over_price_at_add_time(db, user, food):
    cart_crud.add_item(db, user.user_id, food.food_id, 1)
    food.price = Decimal("150")
    db.commit()

    order, _ = _place(db, user)
    assert order.subtotal == Decimal("150.00")


def test_line_items_are_frozen(db, user, food):
    cart_crud.add_item(db, user.user_id, food.food_id, 1)
    order, _ = _place(db, user)
    food.price = Decimal("999")
    food.name = "Renamed"
    db.commit()

    db.refresh(order)
    assert order.items[0].unit_price == Decimal("100.00")
    assert order.items[0].name == "Paneer Tikka"


def test_stale_item_list_is_a_conflict(db, user, food):
    cart_crud.add_item(db, user.user_id, food.food_id, 2)
    with pytest.raises(ConflictError):
        _place(db, user, items=[{"food_id": food.food_id, "quantity": 1}])
    assert db.query(Order).count() == 0


def test_matching_item_list_is_accepted(db, user, food):
    cart_crud.add_item(db, user.user_id, food.food_id, 2)
    order, _ = _place(db, user, items=[{"foodId": food.food_id, "quantity": 2}])
    assert order.amount == Decimal("260.00")


# ---------------- card payment ----------------
def test_card_order_waits_for_payment(db, user, food):
    make_promo(db, code="SAVE10")
    cart_crud.add_item(db, user.user_id, food.food_id, 2)

    order, _ = _place(db, user, method=PaymentMethod.CARD, promo_code="SAVE10")
    assert order.status == OrderStatusEnum.PENDING
    assert promo_crud.get_by_code(db, "SAVE10").usage_count == 0

    order, confirmed = order_crud.verify_payment(db, order.order_id, True, principal_for(user))
    assert confirmed is True
    assert order.status == OrderStatusEnum.CONFIRMED
    assert order.payment is True
    assert order.status_logs[-1].changed_by == StatusChangedByEnum.PAYMENT_SERVICE
    assert promo_crud.get_by_code(db, "SAVE10").usage_count == 1

    # duplicate callback changes nothing
    order, confirmed = order_crud.verify_payment(db, order.order_id, True, principal_for(user))
    assert confirmed is False
    assert len(order.status_logs) == 2


def test_failed_payment_leaves_order_pending(db, user, food):
    cart_crud.add_item(db, user.user_id, food.food_id, 1)
    order, _ = _place(db, user, method=PaymentMethod.CARD)

    order, confirmed = order_crud.verify_payment(db, order.order_id, False, principal_for(user))
    assert confirmed is False
    assert order.status == OrderStatusEnum.PENDING
    assert order.payment is False


def test_failure_callback_after_success_keeps_order_paid(db, user, food):
    cart_crud.add_item(db, user.user_id, food.food_id, 1)
    order, _ = _place(db, user, method=PaymentMethod.CARD)
    order_crud.verify_payment(db, order.order_id, True, principal_for(user))

    with pytest.raises(InvalidStateError):
        order_crud.verify_payment(db, order.order_id, False, principal_for(user))

    db.expire_all()
    order = db.get(Order, order.order_id)
    assert order.status == OrderStatusEnum.CONFIRMED
    assert order.payment is True


def test_success_callback_on_cancelled_card_order(db, user, food):
    cart_crud.add_item(db, user.user_id, food.food_id, 1)
    order, _ = _place(db, user, method=PaymentMethod.CARD)
    order_crud.cancel(db, order.order_id, principal_for(user))

    with pytest.raises(InvalidTransitionError):
        order_crud.verify_payment(db, order.order_id, True, principal_for(user))

    db.expire_all()
    order = db.get(Order, order.order_id)
    assert order.status == OrderStatusEnum.CANCELLED
    assert order.payment is False


def test_failure_callback_on_cancelled_card_order(db, user, food):
    cart_crud.add_item(db, user.user_id, food.food_id, 1)
    order, _ = _place(db, user, method=PaymentMethod.CARD)
    order_crud.cancel(db, order.order_id, principal_for(user))

    with pytest.raises(InvalidStateError):
        order_crud.verify_payment(db, order.order_id, False, principal_for(user))


def test_verify_payment_rejects_cash_orders(db, user, food):
    cart_crud.add_item(db, user.user_id, food.food_id, 1)
    order, _ = _place(db, user)
    with pytest.raises(InvalidStateError):
        order_crud.verify_payment(db, order.order_id, True, principal_for(user))


def test_strangers_cannot_touch_orders(db, user, food):
    cart_crud.add_item(db, user.user_id, food.food_id, 1)
    order, _ = _place(db, user, method=PaymentMethod.CARD)
    stranger = principal_for(make_user(db))

    with pytest.raises(ForbiddenError):
        order_crud.get_for(db, order.order_id, stranger)
    with pytest.raises(ForbiddenError):
        order_crud.verify_payment(db, order.order_id, True, stranger)
    with pytest.raises(ForbiddenError):
        order_crud.cancel(db, order.order_id, stranger)


# ---------------- lifecycle ----------------
def test_cancel_confirmed_order(db, user, food):
    cart_crud.add_item(db, user.user_id, food.food_id, 1)
    order, _ = _place(db, user)

    order = order_crud.cancel(db, order.order_id, principal_for(user), "Changed my mind")
    assert order.status == OrderStatusEnum.CANCELLED
    assert order.status_logs[-1].message == "Changed my mind"
    assert order.status_logs[-1].changed_by == StatusChangedByEnum.USER


def test_admin_cancel_is_logged_as_admin(db, user, admin, food):
    cart_crud.add_item(db, user.user_id, food.food_id, 1)
    order, _ = _place(db, user)
    order = order_crud.cancel(db, order.order_id, principal_for(admin))
    assert order.status_logs[-1].changed_by == StatusChangedByEnum.ADMIN


def test_delivered_order_cannot_be_cancelled(db, user, food):
    cart_crud.add_item(db, user.user_id, food.food_id, 1)
    order, _ = _place(db, user)
    _advance(db, order.order_id, OrderStatus.PREPARING, OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED)
    logs_before = len(order_crud.get(db, order.order_id).status_logs)

    with pytest.raises(InvalidTransitionError):
        order_crud.cancel(db, order.order_id, principal_for(user))

    db.expire_all()
    order = order_crud.get(db, order.order_id)
    assert order.status == OrderStatusEnum.DELIVERED
    assert len(order.status_logs) == logs_before


def test_admin_cannot_skip_states(db, user, food):
    cart_crud.add_item(db, user.user_id, food.food_id, 1)
    order, _ = _place(db, user)
    with pytest.raises(InvalidTransitionError):
        _advance(db, order.order_id, OrderStatus.DELIVERED)


def test_admin_confirm_redeems_card_promo(db, user, food):
    make_promo(db, code="SAVE10")
    cart_crud.add_item(db, user.user_id, food.food_id, 1)
    order, _ = _place(db, user, method=PaymentMethod.CARD, promo_code="SAVE10")

    _advance(db, order.order_id, OrderStatus.CONFIRMED)
    assert promo_crud.get_by_code(db, "SAVE10").usage_count == 1


def test_tracking_lists_newest_first(db, user, food):
    cart_crud.add_item(db, user.user_id, food.food_id, 1)
    order, _ = _place(db, user)
    _advance(db, order.order_id, OrderStatus.PREPARING)

    tracking = order_crud.tracking(db, order.order_id, principal_for(user))
    assert [u["status"] for u in tracking["tracking_updates"]] == [OrderStatusEnum.PREPARING, OrderStatusEnum.CONFIRMED]


def test_rating_requires_delivery(db, user, food):
    cart_crud.add_item(db, user.user_id, food.food_id, 1)
    order, _ = _place(db, user)
    with pytest.raises(InvalidStateError):
        order_crud.rate(db, order.order_id, principal_for(user), 5)

    _advance(db, order.order_id, OrderStatus.PREPARING, OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED)
    order = order_crud.rate(db, order.order_id, principal_for(user), 4, "  Hot and fresh ")
    assert order.rating == 4
    assert order.review == "Hot and fresh"
