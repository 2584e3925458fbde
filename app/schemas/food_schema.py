from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from . import ORMModel


class FoodItemBase(ORMModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    price: float = Field(..., gt=0, le=999999.99)
    category: str = Field(..., min_length=1, max_length=50)
    is_available: bool = True
    image_url: Optional[str] = Field(None, max_length=255)
    is_vegetarian: bool = False
    preparation_time: int = Field(30, ge=0)
    discount_percent: int = Field(0, ge=0, le=100)


class FoodItemCreate(FoodItemBase):
    pass


class FoodItemUpdate(ORMModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    price: Optional[float] = Field(None, gt=0, le=999999.99)
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    is_available: Optional[bool] = None
    image_url: Optional[str] = Field(None, max_length=255)
    is_vegetarian: Optional[bool] = None
    preparation_time: Optional[int] = Field(None, ge=0)
    discount_percent: Optional[int] = Field(None, ge=0, le=100)


class FoodAvailabilityUpdate(ORMModel):
    is_available: bool


class FoodItemOut(FoodItemBase):
    food_id: int
    rating: float = Field(0, ge=0, le=5)
    review_count: int = 0
    created_at: datetime
