from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from . import ORMModel, OrderStatus, PaymentMethod, StatusChangedBy, enum_value
from .user_schema import Address


class OrderLineIn(BaseModel):
    food_id: int = Field(..., alias="foodId")
    quantity: int = Field(..., gt=0)

    model_config = {"populate_by_name": True}


class OrderPlace(BaseModel):
    # When given, items must match the stored cart exactly (stale-checkout guard)
    items: Optional[List[OrderLineIn]] = None
    address: Address
    payment_method: PaymentMethod = Field(PaymentMethod.COD, alias="paymentMethod")
    promo_code: Optional[str] = Field(None, alias="promoCode")
    special_instructions: Optional[str] = Field(None, alias="specialInstructions", max_length=500)

    model_config = {"populate_by_name": True}


class PaymentVerify(BaseModel):
    order_id: int = Field(..., alias="orderId")
    success: bool

    model_config = {"populate_by_name": True}


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    message: Optional[str] = Field(None, max_length=500)


class OrderRate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    review: Optional[str] = Field(None, max_length=1000)


class OrderItemOut(ORMModel):
    food_id: int
    name: str
    category: Optional[str] = None
    image_url: Optional[str] = None
    unit_price: float
    quantity: int


class OrderStatusLogOut(ORMModel):
    status_log_id: int
    from_status: Optional[OrderStatus] = None
    to_status: OrderStatus
    changed_at: datetime
    changed_by: Optional[StatusChangedBy] = None
    message: Optional[str] = None

    @field_validator("from_status", "to_status", "changed_by", mode="before")
    def plain_enums(cls, v):
        return enum_value(v)


class OrderOut(ORMModel):
    order_id: int
    user_id: int
    order_reference: str
    items: List[OrderItemOut] = Field(default_factory=list)
    subtotal: float
    tax: float
    delivery_fee: float
    discount: float
    amount: float
    promo_code: Optional[str] = None
    address: dict
    payment_method: PaymentMethod
    status: OrderStatus
    payment: bool
    special_instructions: Optional[str] = None
    rating: Optional[int] = None
    review: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    status_logs: List[OrderStatusLogOut] = Field(default_factory=list)

    @field_validator("status", "payment_method", mode="before")
    def plain_enums(cls, v):
        return enum_value(v)


class OrderPlaced(BaseModel):
    order_id: int
    order_reference: str
    amount: float
    status: OrderStatus
    payment_method: PaymentMethod
    breakdown: dict
    payment_url: Optional[str] = None
