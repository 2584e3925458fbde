from crud.mongo_crud import MongoCRUD
from model.notification import Notification
from schemas.notification_schemas import NotificationEvent, NotificationUpdate
from utils.helper import utcnow


class NotificationCRUD(MongoCRUD[Notification, NotificationEvent, NotificationUpdate]):
    async def mark_read(self, id: str, user_id: int) -> Notification:
        notif = await self.get(id, filters={"user_id": user_id})
        await notif.set({Notification.is_read: True, Notification.read_at: utcnow()})
        return notif

    async def mark_all_read(self, user_id: int) -> None:
        await Notification.find({"user_id": user_id, "is_read": False}).update(
            {"$set": {"is_read": True, "read_at": utcnow()}}
        )


notification_crud = NotificationCRUD(Notification, label="Notification")
