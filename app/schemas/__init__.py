from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


# Shared Pydantic base with ORM support (Pydantic v2)
class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


# Enums shared across schemas
class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PREPARING = "PREPARING"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, Enum):
    COD = "COD"
    CARD = "CARD"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class StatusChangedBy(str, Enum):
    USER = "USER"
    SYSTEM = "SYSTEM"
    ADMIN = "ADMIN"
    PAYMENT_SERVICE = "PAYMENT_SERVICE"


def enum_value(v):
    # model enums and schema enums share values but are distinct classes
    return v.value if isinstance(v, Enum) else v
