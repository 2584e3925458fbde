import logging

from schemas.notification_schemas import NotificationEvent
from utils.redis_client import push_notification_event

logger = logging.getLogger(__name__)


class OrderNotifier:
    """Fire-and-forget sink for order lifecycle events."""

    async def notify(self, event: NotificationEvent) -> bool:
        try:
            await push_notification_event(event.model_dump(mode="json"))
            return True
        except Exception:
            # a lost notification must never fail the order operation
            logger.warning(
                "notification.failed user=%s order=%s type=%s",
                event.user_id, event.order_id, event.notification_type.value,
                exc_info=True,
            )
            return False


order_notifier = OrderNotifier()


def get_notifier() -> OrderNotifier:
    return order_notifier
