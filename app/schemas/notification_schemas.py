from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from . import ORMModel


class NotificationType(str, Enum):
    ORDER_UPDATE = "order_update"
    PAYMENT = "payment"
    PROMO = "promo"


class NotificationEvent(ORMModel):
    """What the order workflow hands to the notification sink."""
    user_id: int
    order_id: Optional[int] = None
    notification_type: NotificationType = NotificationType.ORDER_UPDATE
    title: str = Field(..., max_length=120)
    message: str
    priority: str = "medium"


class NotificationUpdate(ORMModel):
    is_read: Optional[bool] = None
    read_at: Optional[datetime] = None


class NotificationOut(ORMModel):
    notification_id: str = Field(..., description="Mongo ObjectId as string")
    user_id: int
    order_id: Optional[int] = None
    notification_type: str
    title: str
    message: str
    priority: str
    is_read: bool
    created_at: datetime
    read_at: Optional[datetime] = None
