from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    food_id: int = Field(..., alias="foodId")
    order_id: Optional[int] = Field(None, alias="orderId")
    rating: int = Field(..., ge=1, le=5)
    title: str = Field(..., min_length=1, max_length=150)
    comment: Optional[str] = Field(None, max_length=2000)
    images: List[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    title: Optional[str] = Field(None, min_length=1, max_length=150)
    comment: Optional[str] = Field(None, max_length=2000)
    images: Optional[List[str]] = None


class ReviewHelpful(BaseModel):
    helpful: bool = True


class ReviewOut(BaseModel):
    review_id: int
    user_id: int
    food_id: int
    order_id: Optional[int] = None
    rating: int
    title: str
    comment: Optional[str] = None
    images: Optional[List[str]] = None
    helpful: int
    unhelpful: int
    verified: bool
    created_at: datetime

    model_config = {"from_attributes": True}
