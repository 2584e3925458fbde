from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class CartAdd(BaseModel):
    food_id: int = Field(..., alias="foodId")
    quantity: int = Field(1)

    model_config = {"populate_by_name": True}


class CartQuantityUpdate(BaseModel):
    quantity: int


class CartLine(BaseModel):
    food_id: int
    name: str
    price: float
    quantity: int
    image_url: str | None = None
    category: str | None = None
    is_available: bool = True
    item_total: float


class CartOut(BaseModel):
    items: List[CartLine] = Field(default_factory=list)
    missing: List[int] = Field(default_factory=list, description="food ids no longer in the catalog")
    subtotal: float = 0
    item_count: int = 0


class CartLineSummary(BaseModel):
    food_id: int
    quantity: int
    subtotal: float
    item_count: int
