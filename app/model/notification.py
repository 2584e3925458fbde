from beanie import Document
from typing import Optional
from datetime import datetime
from pydantic import Field
from utils.helper import utcnow

class Notification(Document):
    user_id: int
    order_id: Optional[int] = None
    notification_type: str
    title: str
    message: str
    priority: str = "medium"
    is_read: bool = False
    delivered: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    read_at: Optional[datetime] = None

    class Settings:
        name = "notifications"
