from decimal import Decimal

import pytest

from conftest import make_food, make_user
from crud.cart_crud import cart_crud
from model.cart import CartItem
from utils.errors import ConflictError, InvalidInputError, NotFoundError, UnavailableError


def test_add_inserts_then_increments(db, user):
    food = make_food(db, price="120")
    cart_crud.add_item(db, user.user_id, food.food_id, 2)
    line = cart_crud.add_item(db, user.user_id, food.food_id, 3)

    assert line["quantity"] == 5
    assert line["subtotal"] == 600.0
    assert db.query(CartItem).count() == 1


def test_add_unknown_food(db, user):
    with pytest.raises(NotFoundError):
        cart_crud.add_item(db, user.user_id, 999, 1)


def test_add_unavailable_food(db, user):
    food = make_food(db, available=False)
    with pytest.raises(UnavailableError):
        cart_crud.add_item(db, user.user_id, food.food_id, 1)


@pytest.mark.parametrize("qty", [0, -2, 1.5, True])
def test_add_rejects_bad_quantity(db, user, qty):
    food = make_food(db)
    with pytest.raises(InvalidInputError):
        cart_crud.add_item(db, user.user_id, food.food_id, qty)
    assert db.query(CartItem).count() == 0


def test_set_quantity_overwrites_and_zero_removes(db, user):
    food = make_food(db)
    cart_crud.add_item(db, user.user_id, food.food_id, 4)

    assert cart_crud.set_quantity(db, user.user_id, food.food_id, 1)["quantity"] == 1
    assert cart_crud.set_quantity(db, user.user_id, food.food_id, 0)["quantity"] == 0
    assert cart_crud.entries(db, user.user_id) == []


def test_set_quantity_on_missing_line(db, user):
    with pytest.raises(NotFoundError):
        cart_crud.set_quantity(db, user.user_id, 42, 3)


def test_remove_missing_line(db, user):
    with pytest.raises(NotFoundError):
        cart_crud.remove_item(db, user.user_id, 42)


def test_empty_cart_is_not_an_error(db, user):
    cart = cart_crud.get_cart(db, user.user_id)
    assert cart == {"items": [], "missing": [], "subtotal": 0.0, "item_count": 0}


def test_subtotal_uses_current_prices(db, user):
    pizza = make_food(db, price="250.50")
    soda = make_food(db, price="40")
    cart_crud.add_item(db, user.user_id, pizza.food_id, 2)
    cart_crud.add_item(db, user.user_id, soda.food_id, 3)

    pizza.price = Decimal("200")
    db.commit()

    cart = cart_crud.get_cart(db, user.user_id)
    assert cart["subtotal"] == 520.0
    assert {line["food_id"]: line["item_total"] for line in cart["items"]} == {pizza.food_id: 400.0, soda.food_id: 120.0}


def test_deleted_food_is_reported_missing(db, user):
    keep = make_food(db, price="10")
    gone = make_food(db, price="99")
    cart_crud.add_item(db, user.user_id, keep.food_id, 1)
    cart_crud.add_item(db, user.user_id, gone.food_id, 1)
    gone_id = gone.food_id
    db.delete(gone)
    db.commit()

    cart = cart_crud.get_cart(db, user.user_id)
    assert cart["missing"] == [gone_id]
    assert cart["subtotal"] == 10.0
    assert cart["item_count"] == 2


def test_summary_goes_through_pricing(db, user):
    food = make_food(db, price="100")
    cart_crud.add_item(db, user.user_id, food.food_id, 2)
    summary = cart_crud.summary(db, user.user_id)
    assert summary["total"] == 260.0
    assert summary["tax"] == 10.0


def test_carts_are_per_user(db, user):
    other = make_user(db)
    food = make_food(db)
    cart_crud.add_item(db, user.user_id, food.food_id, 1)
    cart_crud.add_item(db, other.user_id, food.food_id, 7)

    assert cart_crud.clear(db, user.user_id) == 1
    assert cart_crud.entries(db, other.user_id)[0].quantity == 7


def test_consume_detects_concurrent_change(db, user):
    food = make_food(db)
    cart_crud.add_item(db, user.user_id, food.food_id, 2)
    snapshot = cart_crud.entries(db, user.user_id)
    seen = [CartItem(cart_item_id=e.cart_item_id, user_id=e.user_id, food_id=e.food_id, quantity=e.quantity) for e in snapshot]

    # another request bumps the quantity after the checkout read the cart
    cart_crud.add_item(db, user.user_id, food.food_id, 1)

    with pytest.raises(ConflictError):
        cart_crud.consume(db, user.user_id, seen)
    db.rollback()
    assert cart_crud.entries(db, user.user_id)[0].quantity == 3
