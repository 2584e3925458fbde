from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from . import DiscountType, ORMModel, enum_value
from utils.helper import to_naive_utc


class PromoCodeBase(ORMModel):
    code: str = Field(..., min_length=3, max_length=50)
    description: Optional[str] = None
    discount_type: DiscountType
    discount_value: float = Field(..., gt=0)
    min_order_amount: float = Field(0, ge=0)
    max_discount: Optional[float] = Field(None, gt=0)
    usage_limit: Optional[int] = Field(None, ge=1)
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None

    @field_validator("discount_type", mode="before")
    def plain_enums(cls, v):
        return enum_value(v)

    @field_validator("code")
    def normalize_code(cls, v):
        return v.strip().upper()

    @field_validator("valid_from", "valid_until")
    def normalize_dates(cls, v):
        return to_naive_utc(v)


class PromoCodeCreate(PromoCodeBase):
    active: bool = True

    @model_validator(mode="after")
    def check_rules(self):
        if self.valid_from and self.valid_until and self.valid_until <= self.valid_from:
            raise ValueError("valid_until must be after valid_from")
        if self.discount_type == DiscountType.PERCENTAGE and self.discount_value > 100:
            raise ValueError("percentage discount cannot exceed 100")
        return self


class PromoCodeUpdate(ORMModel):
    description: Optional[str] = None
    discount_value: Optional[float] = Field(None, gt=0)
    min_order_amount: Optional[float] = Field(None, ge=0)
    max_discount: Optional[float] = Field(None, gt=0)
    usage_limit: Optional[int] = Field(None, ge=1)
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    active: Optional[bool] = None

    @field_validator("valid_from", "valid_until")
    def normalize_dates(cls, v):
        return to_naive_utc(v)


class PromoCodeOut(PromoCodeBase):
    promo_id: int
    usage_count: int
    active: bool
    created_at: datetime


class PromoCodePublic(ORMModel):
    code: str
    description: Optional[str] = None
    discount_type: DiscountType
    discount_value: float
    min_order_amount: float
    max_discount: Optional[float] = None
    valid_until: Optional[datetime] = None

    @field_validator("discount_type", mode="before")
    def plain_enums(cls, v):
        return enum_value(v)


class PromoValidateRequest(BaseModel):
    code: str = Field(..., min_length=1)
    order_amount: float = Field(..., alias="orderAmount", ge=0)

    model_config = {"populate_by_name": True}


class PromoApplyRequest(BaseModel):
    code: str = Field(..., min_length=1)
    order_id: Optional[int] = Field(None, alias="orderId")

    model_config = {"populate_by_name": True}
