import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from crud.order_crud import order_crud
from database import get_db
from model.order import Order, OrderStatusEnum
from schemas import OrderStatus, PaymentMethod, UserRole
from schemas.notification_schemas import NotificationEvent, NotificationType
from schemas.order_schema import OrderOut, OrderPlace, OrderPlaced, OrderRate, OrderStatusUpdate, PaymentVerify
from utils.auth.jwt_bearer import Principal, get_principal, require_role
from utils.errors import PaymentDeclinedError, UpstreamFailureError
from utils.helper import paginate
from utils.notifier import OrderNotifier, get_notifier
from utils.order_status import STATUS_LABELS
from utils.payment_gateway import CheckoutGateway, get_payment_gateway
from utils.response import paginated_response, success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/order", tags=["Orders"])


def _status_event(order: Order, title: str, message: str, notification_type=NotificationType.ORDER_UPDATE, priority: str = "medium") -> NotificationEvent:
    return NotificationEvent(
        user_id=order.user_id,
        order_id=order.order_id,
        notification_type=notification_type,
        title=title,
        message=message,
        priority=priority,
    )


@router.post("/place", status_code=status.HTTP_201_CREATED)
async def place_order(
    data: OrderPlace,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    notifier: OrderNotifier = Depends(get_notifier),
    gateway: CheckoutGateway = Depends(get_payment_gateway),
):
    order, breakdown = order_crud.place_order(db, principal.user_id, data)

    placed = OrderPlaced(
        order_id=order.order_id,
        order_reference=order.order_reference,
        amount=float(order.amount),
        status=OrderStatus(order.status.value),
        payment_method=PaymentMethod(order.payment_method.value),
        breakdown=breakdown.as_dict(),
    )

    if order.status == OrderStatusEnum.CONFIRMED:
        await notifier.notify(_status_event(
            order, "Order Confirmed",
            f"Your order {order.order_reference} for Rs. {order.amount} has been confirmed.",
            priority="high",
        ))
        return success_response("Order placed successfully", placed)

    await notifier.notify(_status_event(
        order, "Order Placed",
        f"Your order {order.order_reference} is awaiting payment of Rs. {order.amount}.",
        notification_type=NotificationType.PAYMENT,
    ))
    try:
        placed.payment_url = await gateway.create_checkout_session(order)
    except UpstreamFailureError:
        # the order stays PENDING; the client can retry payment or cancel it
        logger.warning("order.checkout_unavailable order=%s", order.order_id)
        raise
    return success_response("Order placed, complete payment to confirm", placed)


@router.post("/verify-payment")
async def verify_payment(
    data: PaymentVerify,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    notifier: OrderNotifier = Depends(get_notifier),
):
    order, confirmed_now = order_crud.verify_payment(db, data.order_id, data.success, principal)
    if not data.success:
        await notifier.notify(_status_event(
            order, "Payment Failed",
            f"Payment for order {order.order_reference} did not go through.",
            notification_type=NotificationType.PAYMENT, priority="high",
        ))
        raise PaymentDeclinedError("Payment failed", errors={"order_id": order.order_id})

    if confirmed_now:
        await notifier.notify(_status_event(
            order, "Payment Successful",
            f"Payment received, your order {order.order_reference} is confirmed.",
            notification_type=NotificationType.PAYMENT, priority="high",
        ))
        return success_response("Payment verified, order confirmed", OrderOut.model_validate(order))
    return success_response("Payment already verified", OrderOut.model_validate(order))


@router.post("/{order_id}/cancel")
async def cancel_order(
    order_id: int,
    reason: Optional[str] = Query(None, max_length=500),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    notifier: OrderNotifier = Depends(get_notifier),
):
    order = order_crud.cancel(db, order_id, principal, reason)
    await notifier.notify(_status_event(
        order, "Order Cancelled",
        f"Your order {order.order_reference} has been cancelled.",
    ))
    return success_response("Order cancelled successfully", OrderOut.model_validate(order))


@router.get("/my")
def get_my_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    page, limit, skip = paginate(page, limit)
    orders, total = order_crud.list_for_user(
        db, principal.user_id, skip=skip, limit=limit,
        status=OrderStatusEnum(order_status.value) if order_status else None,
    )
    return paginated_response("Orders retrieved successfully", [OrderOut.model_validate(o) for o in orders], page, limit, total)


@router.get("")
def get_all_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
    user_id: Optional[int] = Query(None, alias="userId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role(UserRole.ADMIN)),
):
    page, limit, skip = paginate(page, limit)
    orders, total = order_crud.list_all(
        db, skip=skip, limit=limit, user_id=user_id,
        status=OrderStatusEnum(order_status.value) if order_status else None,
    )
    return paginated_response("Orders retrieved successfully", [OrderOut.model_validate(o) for o in orders], page, limit, total)


@router.get("/{order_id}")
def get_order(order_id: int, db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    order = order_crud.get_for(db, order_id, principal)
    return success_response("Order retrieved successfully", OrderOut.model_validate(order))


@router.get("/{order_id}/track")
def track_order(order_id: int, db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    return success_response("Order tracking retrieved", order_crud.tracking(db, order_id, principal))


@router.post("/{order_id}/rate")
def rate_order(
    order_id: int,
    data: OrderRate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    order = order_crud.rate(db, order_id, principal, data.rating, data.review)
    return success_response("Thank you for your feedback", OrderOut.model_validate(order))


@router.put("/{order_id}/status")
async def update_order_status(
    order_id: int,
    data: OrderStatusUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role(UserRole.ADMIN)),
    notifier: OrderNotifier = Depends(get_notifier),
):
    order = order_crud.update_status(db, order_id, data)
    label = STATUS_LABELS[OrderStatusEnum(order.status)]
    await notifier.notify(_status_event(
        order, f"Order {label}",
        data.message or f"Your order {order.order_reference} is now {label.lower()}.",
    ))
    return success_response("Order status updated", OrderOut.model_validate(order))
