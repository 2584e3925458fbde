from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from schemas.food_schema import FoodItemOut


class WishlistEntry(FoodItemOut):
    added_at: datetime


class WishlistOut(BaseModel):
    items: List[WishlistEntry] = Field(default_factory=list)
    count: int = 0
