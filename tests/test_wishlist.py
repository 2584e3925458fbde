import pytest

from conftest import auth_headers, make_food, make_user
from crud.wishlist_crud import wishlist_crud
from model.food import FoodItem
from model.wishlist import WishlistItem
from utils.errors import NotFoundError


def test_add_is_idempotent(db, user):
    food = make_food(db)
    assert wishlist_crud.add(db, user.user_id, food.food_id) is True
    assert wishlist_crud.add(db, user.user_id, food.food_id) is False
    assert db.query(WishlistItem).count() == 1


def test_add_unknown_food(db, user):
    with pytest.raises(NotFoundError):
        wishlist_crud.add(db, user.user_id, 9999)
    assert db.query(WishlistItem).count() == 0


def test_wishlist_is_per_user_and_skips_deleted_foods(db, user):
    kept, dropped = make_food(db), make_food(db)
    other = make_user(db)
    wishlist_crud.add(db, user.user_id, kept.food_id)
    wishlist_crud.add(db, user.user_id, dropped.food_id)
    wishlist_crud.add(db, other.user_id, kept.food_id)

    db.query(FoodItem).filter(FoodItem.food_id == dropped.food_id).delete()
    db.commit()

    rows = wishlist_crud.get_wishlist(db, user.user_id)
    assert [food.food_id for food, _ in rows] == [kept.food_id]


def test_remove_and_clear(db, user):
    foods = [make_food(db) for _ in range(3)]
    for food in foods:
        wishlist_crud.add(db, user.user_id, food.food_id)

    assert wishlist_crud.remove(db, user.user_id, foods[0].food_id) == 1
    assert wishlist_crud.remove(db, user.user_id, foods[0].food_id) == 0
    assert wishlist_crud.clear(db, user.user_id) == 2
    assert wishlist_crud.get_wishlist(db, user.user_id) == []


def test_wishlist_endpoints(client, db, user):
    food = make_food(db, name="Veg Biryani")
    headers = auth_headers(user)

    assert client.get("/api/wishlist").status_code == 401

    added = client.post(f"/api/wishlist/{food.food_id}", headers=headers).json()
    assert added["message"] == "Added to wishlist"
    assert added["data"]["count"] == 1
    assert added["data"]["items"][0]["name"] == "Veg Biryani"
    assert added["data"]["items"][0]["added_at"]

    again = client.post(f"/api/wishlist/{food.food_id}", headers=headers).json()
    assert again["message"] == "Already in wishlist"
    assert again["data"]["count"] == 1

    assert client.post("/api/wishlist/9999", headers=headers).status_code == 404

    removed = client.delete(f"/api/wishlist/{food.food_id}", headers=headers).json()
    assert removed["data"]["items"] == []

    client.post(f"/api/wishlist/{food.food_id}", headers=headers)
    cleared = client.delete("/api/wishlist", headers=headers, follow_redirects=False)
    assert cleared.status_code == 200
    assert cleared.json()["data"]["removed"] == 1
    assert client.get("/api/wishlist", headers=headers).json()["data"]["count"] == 0
