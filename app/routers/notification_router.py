from typing import Optional

from fastapi import APIRouter, Depends, Query

from crud.notification_crud import notification_crud
from model.notification import Notification
from schemas.notification_schemas import NotificationOut
from utils.auth.jwt_bearer import Principal, get_principal
from utils.helper import paginate
from utils.response import paginated_response, success_response

router = APIRouter(prefix="/api/notification", tags=["Notifications"])


def _out(notif: Notification) -> NotificationOut:
    return NotificationOut(notification_id=str(notif.id), **notif.model_dump(exclude={"id", "revision_id", "delivered"}))


@router.get("")
async def get_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    read: Optional[bool] = Query(None),
    principal: Principal = Depends(get_principal),
):
    page, limit, skip = paginate(page, limit)
    filters = {"user_id": principal.user_id}
    if read is not None:
        filters["is_read"] = read
    items, total = await notification_crud.get_page(skip=skip, limit=limit, filters=filters)
    return paginated_response("Notifications retrieved successfully", [_out(n) for n in items], page, limit, total)


@router.get("/unread-count")
async def unread_count(principal: Principal = Depends(get_principal)):
    count = await notification_crud.count({"user_id": principal.user_id, "is_read": False})
    return success_response("Unread count retrieved", {"count": count})


@router.patch("/{id}/read")
async def mark_read(id: str, principal: Principal = Depends(get_principal)):
    notif = await notification_crud.mark_read(id, principal.user_id)
    return success_response("Notification marked as read", _out(notif))


@router.post("/read-all")
async def mark_all_read(principal: Principal = Depends(get_principal)):
    await notification_crud.mark_all_read(principal.user_id)
    return success_response("All notifications marked as read")


@router.delete("/{id}")
async def delete_notification(id: str, principal: Principal = Depends(get_principal)):
    notif = await notification_crud.get(id, filters={"user_id": principal.user_id})
    return success_response("Notification deleted", await notification_crud.remove(notif))
