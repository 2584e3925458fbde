from conftest import ADDRESS, auth_headers, fake, make_food, make_user
from model.food import FoodItem
from model.order import Order, OrderStatusEnum
from schemas.notification_schemas import NotificationType


def _add(client, user, food, quantity=1):
    return client.post("/api/cart/add", json={"foodId": food.food_id, "quantity": quantity}, headers=auth_headers(user))


def _place(client, user, **body):
    payload = {"address": ADDRESS, "paymentMethod": "COD"}
    payload.update(body)
    return client.post("/api/order/place", json=payload, headers=auth_headers(user))


def test_envelope_on_success(client):
    body = client.get("/").json()
    assert body["success"] is True
    assert body["data"] == {"status": "ok"}
    assert body["timestamp"]


def test_missing_token_is_unauthorized(client):
    resp = client.get("/api/cart")
    assert resp.status_code == 401
    assert resp.json()["success"] is False


def test_unknown_route_uses_envelope(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.json()["success"] is False


def test_admin_only_endpoints(client, db, user, admin):
    food = {"name": "Masala Dosa", "price": 80, "category": "South Indian"}
    assert client.post("/api/food", json=food, headers=auth_headers(user)).status_code == 403

    resp = client.post("/api/food", json=food, headers=auth_headers(admin))
    assert resp.status_code == 201
    assert resp.json()["data"]["name"] == "Masala Dosa"


def test_register_login_and_profile(client):
    email = fake.unique.email()
    reg = client.post("/api/user/register", json={"name": "Meera", "email": email, "password": "Secret123"})
    assert reg.status_code == 201
    assert "password" not in reg.json()["data"]

    dup = client.post("/api/user/register", json={"name": "Meera", "email": email, "password": "Secret123"})
    assert dup.status_code == 409

    bad = client.post("/api/user/login", json={"email": email, "password": "Wrong1234"})
    assert bad.status_code == 401

    login = client.post("/api/user/login", json={"email": email, "password": "Secret123"})
    assert login.status_code == 200
    token = login.json()["data"]["access_token"]
    assert "refresh_token" in login.cookies

    headers = {"Authorization": f"Bearer {token}"}
    me = client.put("/api/user/me", json={"phone": "9876543210", "address": ADDRESS}, headers=headers)
    assert me.json()["data"]["address"]["city"] == "Bengaluru"


def test_logout_revokes_access_token(client, user):
    headers = auth_headers(user)
    assert client.get("/api/user/me", headers=headers).status_code == 200
    assert client.post("/api/user/logout", headers=headers).status_code == 200
    assert client.get("/api/user/me", headers=headers).status_code == 401


def test_validation_errors_are_400_with_fields(client, user):
    resp = client.post("/api/cart/add", json={"quantity": 2}, headers=auth_headers(user))
    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Validation failed"
    assert any(e["field"] == "foodId" for e in body["errors"])


def test_cart_endpoints(client, db, user):
    food = make_food(db, price="45.50")
    assert _add(client, user, food, 0).status_code == 400

    line = _add(client, user, food, 2).json()["data"]
    assert line == {"food_id": food.food_id, "quantity": 2, "subtotal": 91.0, "item_count": 1}

    updated = client.put(f"/api/cart/{food.food_id}", json={"quantity": 0}, headers=auth_headers(user))
    assert updated.json()["data"]["quantity"] == 0
    assert client.get("/api/cart", headers=auth_headers(user)).json()["data"]["items"] == []
    assert client.delete(f"/api/cart/{food.food_id}", headers=auth_headers(user)).status_code == 404


def test_clear_cart_matches_without_trailing_slash(client, db, user):
    _add(client, user, make_food(db), 1)
    _add(client, user, make_food(db), 3)

    resp = client.delete("/api/cart", headers=auth_headers(user), follow_redirects=False)
    assert resp.status_code == 200
    assert resp.json()["data"] == {"removed": 2}
    assert client.get("/api/cart", headers=auth_headers(user), follow_redirects=False).json()["data"]["items"] == []


def test_food_listing_is_paginated(client, db):
    for i in range(3):
        make_food(db, price=str(10 + i), category="Snacks")
    make_food(db, price="500", category="Mains")

    body = client.get("/api/food", params={"category": "Snacks", "limit": 2, "sort": "-price"}).json()
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}
    assert [f["price"] for f in body["data"]] == [12.0, 11.0]


def test_place_cash_order(client, db, user, notifier):
    food = make_food(db, price="100")
    _add(client, user, food, 2)

    resp = _place(client, user)
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["status"] == "CONFIRMED"
    assert data["amount"] == 260.0
    assert data["payment_url"] is None
    assert data["breakdown"]["tax"] == 10.0
    assert [e.title for e in notifier.events] == ["Order Confirmed"]

    mine = client.get("/api/order/my", headers=auth_headers(user)).json()
    assert mine["pagination"]["total"] == 1
    assert mine["data"][0]["items"][0]["quantity"] == 2


def test_place_card_order_and_verify(client, db, user, notifier, gateway):
    food = make_food(db, price="100")
    _add(client, user, food, 1)

    data = _place(client, user, paymentMethod="CARD").json()["data"]
    assert data["status"] == "PENDING"
    assert data["payment_url"].endswith(f"/{data['order_id']}")
    assert gateway.sessions == [data["order_id"]]

    declined = client.post("/api/order/verify-payment", json={"orderId": data["order_id"], "success": False}, headers=auth_headers(user))
    assert declined.status_code == 400
    assert declined.json()["errors"] == {"order_id": data["order_id"]}

    ok = client.post("/api/order/verify-payment", json={"orderId": data["order_id"], "success": True}, headers=auth_headers(user))
    assert ok.status_code == 200
    assert ok.json()["data"]["status"] == "CONFIRMED"
    assert ok.json()["data"]["payment"] is True
    assert notifier.events[-1].notification_type == NotificationType.PAYMENT

    sent = len(notifier.events)
    late = client.post("/api/order/verify-payment", json={"orderId": data["order_id"], "success": False}, headers=auth_headers(user))
    assert late.status_code == 400
    assert late.json()["message"] == "Payment for this order is already settled"
    assert len(notifier.events) == sent

    order = client.get(f"/api/order/{data['order_id']}", headers=auth_headers(user)).json()["data"]
    assert order["status"] == "CONFIRMED"
    assert order["payment"] is True


def test_gateway_failure_keeps_pending_order(client, db, user, gateway):
    gateway.fail = True
    food = make_food(db)
    _add(client, user, food, 1)

    resp = _place(client, user, paymentMethod="CARD")
    assert resp.status_code == 502
    order_id = resp.json()["errors"]["order_id"]

    db.expire_all()
    order = db.query(Order).filter(Order.order_id == order_id).one()
    assert order.status == OrderStatusEnum.PENDING
    assert order.payment is False


def test_place_with_deleted_food(client, db, user):
    food = make_food(db)
    _add(client, user, food, 1)
    db.query(FoodItem).filter(FoodItem.food_id == food.food_id).delete()
    db.commit()

    resp = _place(client, user)
    assert resp.status_code == 404
    db.expire_all()
    assert db.query(Order).count() == 0
    assert len(client.get("/api/cart", headers=auth_headers(user)).json()["data"]["missing"]) == 1


def test_cancel_and_admin_status_flow(client, db, user, admin, notifier):
    food = make_food(db)
    _add(client, user, food, 1)
    order_id = _place(client, user).json()["data"]["order_id"]

    for status in ("PREPARING", "OUT_FOR_DELIVERY", "DELIVERED"):
        resp = client.put(f"/api/order/{order_id}/status", json={"status": status}, headers=auth_headers(admin))
        assert resp.status_code == 200

    cancel = client.post(f"/api/order/{order_id}/cancel", headers=auth_headers(user))
    assert cancel.status_code == 400
    assert cancel.json()["errors"]["from"] == "DELIVERED"

    track = client.get(f"/api/order/{order_id}/track", headers=auth_headers(user)).json()["data"]
    assert track["current_status"] == "DELIVERED"
    assert len(track["tracking_updates"]) == 4
    assert notifier.events[-1].title == "Order Delivered"


def test_user_cannot_read_another_users_order(client, db, user):
    food = make_food(db)
    _add(client, user, food, 1)
    order_id = _place(client, user).json()["data"]["order_id"]

    stranger = make_user(db)
    assert client.get(f"/api/order/{order_id}", headers=auth_headers(stranger)).status_code == 403


def test_promo_endpoints(client, db, user, admin):
    created = client.post(
        "/api/promo",
        json={"code": "welcome20", "discount_type": "percentage", "discount_value": 20, "max_discount": 30},
        headers=auth_headers(admin),
    )
    assert created.status_code == 201
    assert created.json()["data"]["code"] == "WELCOME20"

    dup = client.post(
        "/api/promo",
        json={"code": "WELCOME20", "discount_type": "fixed", "discount_value": 5},
        headers=auth_headers(admin),
    )
    assert dup.status_code == 409

    quote = client.post("/api/promo/validate", json={"code": "Welcome20", "orderAmount": 500}, headers=auth_headers(user))
    assert quote.json()["message"] == "Promo code is valid"
    assert quote.json()["data"]["discount_amount"] == 30.0
    assert quote.json()["data"]["final_amount"] == 470.0

    missing = client.post("/api/promo/validate", json={"code": "NOPE", "orderAmount": 500}, headers=auth_headers(user))
    assert missing.status_code == 404
    assert missing.json()["errors"] == {"reason": "NOT_FOUND"}

    first = client.post("/api/promo/apply", json={"code": "WELCOME20"}, headers=auth_headers(user)).json()["data"]
    again = client.post("/api/promo/apply", json={"code": "WELCOME20"}, headers=auth_headers(user)).json()["data"]
    assert (first["newly_applied"], again["newly_applied"]) == (True, False)
    assert again["usage_count"] == 1

    used = client.post("/api/promo/validate", json={"code": "WELCOME20", "orderAmount": 500}, headers=auth_headers(user))
    assert used.json()["errors"] == {"reason": "ALREADY_USED"}


def test_promo_with_inverted_window_is_rejected(client, admin):
    resp = client.post(
        "/api/promo",
        json={
            "code": "BACKWARDS",
            "discount_type": "fixed",
            "discount_value": 10,
            "valid_from": "2030-01-02T00:00:00",
            "valid_until": "2030-01-01T00:00:00",
        },
        headers=auth_headers(admin),
    )
    assert resp.status_code == 400


def test_reviews_update_food_rating(client, db, user):
    food = make_food(db)
    other = make_user(db)

    first = client.post("/api/review", json={"foodId": food.food_id, "rating": 5, "title": "Superb"}, headers=auth_headers(user))
    assert first.status_code == 201
    client.post("/api/review", json={"foodId": food.food_id, "rating": 4, "title": "Good"}, headers=auth_headers(other))

    dup = client.post("/api/review", json={"foodId": food.food_id, "rating": 1, "title": "Again"}, headers=auth_headers(user))
    assert dup.status_code == 409

    item = client.get(f"/api/food/{food.food_id}").json()["data"]
    assert item["rating"] == 4.5
    assert item["review_count"] == 2

    review_id = first.json()["data"]["review_id"]
    assert client.delete(f"/api/review/{review_id}", headers=auth_headers(other)).status_code == 403
    assert client.delete(f"/api/review/{review_id}", headers=auth_headers(user)).status_code == 200
    assert client.get(f"/api/food/{food.food_id}").json()["data"]["rating"] == 4.0


def test_review_for_undelivered_order_is_rejected(client, db, user):
    food = make_food(db)
    _add(client, user, food, 1)
    order_id = _place(client, user).json()["data"]["order_id"]

    resp = client.post(
        "/api/review",
        json={"foodId": food.food_id, "orderId": order_id, "rating": 5, "title": "Early"},
        headers=auth_headers(user),
    )
    assert resp.status_code == 400
