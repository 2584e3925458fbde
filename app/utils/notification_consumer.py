import asyncio
import logging

from model.notification import Notification
from utils.redis_client import redis_client, STREAM_KEY
from utils.ws_manager import ws_manager

logger = logging.getLogger(__name__)

LAST_ID_KEY = "notification_last_id"


def _to_notification(fields: dict) -> Notification:
    order_id = fields.get("order_id")
    return Notification(
        user_id=int(fields["user_id"]),
        order_id=int(order_id) if order_id else None,
        notification_type=fields.get("notification_type") or "order_update",
        title=fields.get("title") or "Notification",
        message=fields.get("message", ""),
        priority=fields.get("priority") or "medium",
    )


async def consume_notifications():
    last_id = await redis_client.get(LAST_ID_KEY) or "0-0"

    while True:
        try:
            messages = await redis_client.xread(
                streams={STREAM_KEY: last_id},
                count=10,
                block=5000
            )
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("notification.consumer redis read failed")
            await asyncio.sleep(2)
            continue

        if not messages:
            continue

        _, entries = messages[0]

        for msg_id, fields in entries:
            try:
                notif = await _to_notification(fields).insert()

                # offline users get it from the backlog when their socket connects
                if ws_manager.is_online(notif.user_id):
                    delivered = await ws_manager.send_personal_message(notif.user_id, {
                        "id": str(notif.id),
                        "type": notif.notification_type,
                        "title": notif.title,
                        "message": notif.message,
                        "order_id": notif.order_id,
                    })
                    if delivered:
                        await notif.set({Notification.delivered: True})
            except Exception:
                logger.exception("notification.consumer failed to handle %s", msg_id)

            # advance even on failure so one bad event cannot wedge the stream
            last_id = msg_id
            await redis_client.set(LAST_ID_KEY, last_id)
