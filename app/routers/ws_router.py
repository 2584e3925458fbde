import logging

from fastapi import WebSocket, WebSocketDisconnect, APIRouter, HTTPException, status

from model.notification import Notification
from utils.auth.jwt_handler import verify_access_token
from utils.ws_manager import ws_manager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws/notifications")
async def websocket_notifications(websocket: WebSocket, token: str):
    try:
        payload = verify_access_token(token)
    except HTTPException:
        payload = None
    if not payload or not payload.get("user_id"):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    user_id = int(payload["user_id"])
    await ws_manager.connect(websocket, user_id)

    # flush anything the consumer stored while the user was offline
    undelivered = await Notification.find({"user_id": user_id, "delivered": False}).to_list()
    for notif in undelivered:
        await websocket.send_json({
            "id": str(notif.id),
            "order_id": notif.order_id,
            "notification_type": notif.notification_type,
            "title": notif.title,
            "message": notif.message,
            "created_at": notif.created_at.isoformat(),
        })
        await Notification.find({"_id": notif.id}).update({"$set": {"delivered": True}})

    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("ws.disconnect user=%s", user_id)
        await ws_manager.disconnect(websocket)
