import os

# must be set before the app modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENABLE_NOTIFICATION_CONSUMER"] = "false"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from decimal import Decimal

import pytest
from faker import Faker
from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine
from main import app
from model.food import FoodItem
from model.promo import DiscountTypeEnum, PromoCode
from model.user import User
from schemas import UserRole
from utils.auth.jwt_bearer import Principal
from utils.auth.jwt_handler import create_access_token
from utils.errors import UpstreamFailureError
from utils.notifier import get_notifier
from utils.payment_gateway import get_payment_gateway

fake = Faker()

ADDRESS = {
    "first_name": "Asha",
    "last_name": "Rao",
    "street": "12 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "zipcode": "560001",
    "country": "India",
    "phone": "+91 98765 43210",
}


class RecordingNotifier:
    def __init__(self):
        self.events = []

    async def notify(self, event):
        self.events.append(event)
        return True


class FakeGateway:
    def __init__(self):
        self.fail = False
        self.sessions = []

    async def create_checkout_session(self, order):
        if self.fail:
            raise UpstreamFailureError(
                "Payment gateway unavailable; your order is saved as pending",
                errors={"order_id": order.order_id},
            )
        self.sessions.append(order.order_id)
        return f"https://checkout.example.test/session/{order.order_id}"


@pytest.fixture
def schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(schema):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(schema, notifier, gateway):
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ---------------- factories ----------------
def make_user(db, role: UserRole = UserRole.USER) -> User:
    user = User(
        name=fake.name(),
        email=fake.unique.email(),
        phone=fake.msisdn()[:10],
        password="not-a-real-hash",
        role=role.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_food(db, price="100", available=True, **kw) -> FoodItem:
    food = FoodItem(
        name=kw.pop("name", fake.unique.word().title() + " Bowl"),
        description=kw.pop("description", fake.sentence()),
        price=Decimal(str(price)),
        category=kw.pop("category", "Mains"),
        is_available=available,
        **kw,
    )
    db.add(food)
    db.commit()
    db.refresh(food)
    return food


def make_promo(db, code="SAVE10", discount_type=DiscountTypeEnum.PERCENTAGE, value="10", **kw) -> PromoCode:
    kw.setdefault("min_order_amount", Decimal("0"))
    kw.setdefault("usage_count", 0)
    promo = PromoCode(
        code=code,
        discount_type=discount_type,
        discount_value=Decimal(str(value)),
        **kw,
    )
    db.add(promo)
    db.commit()
    db.refresh(promo)
    return promo


def principal_for(user: User) -> Principal:
    return Principal(user_id=user.user_id, email=user.email, role=UserRole(user.role))


def auth_headers(user: User) -> dict:
    token = create_access_token({"user_id": user.user_id, "email": user.email, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user(db):
    return make_user(db)


@pytest.fixture
def admin(db):
    return make_user(db, role=UserRole.ADMIN)
