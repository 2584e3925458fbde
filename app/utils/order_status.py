from typing import Dict, FrozenSet

from model.order import OrderStatusEnum, PaymentMethodEnum
from utils.errors import InvalidStateError, InvalidTransitionError

S = OrderStatusEnum

ALLOWED_TRANSITIONS: Dict[OrderStatusEnum, FrozenSet[OrderStatusEnum]] = {
    S.PENDING: frozenset({S.CONFIRMED, S.CANCELLED}),
    S.CONFIRMED: frozenset({S.PREPARING, S.CANCELLED}),
    S.PREPARING: frozenset({S.OUT_FOR_DELIVERY}),
    S.OUT_FOR_DELIVERY: frozenset({S.DELIVERED}),
    S.DELIVERED: frozenset(),
    S.CANCELLED: frozenset(),
}

CANCELLABLE = frozenset({S.PENDING, S.CONFIRMED})
TERMINAL = frozenset({S.DELIVERED, S.CANCELLED})

STATUS_LABELS = {
    S.PENDING: "Pending",
    S.CONFIRMED: "Confirmed",
    S.PREPARING: "Preparing",
    S.OUT_FOR_DELIVERY: "Out for Delivery",
    S.DELIVERED: "Delivered",
    S.CANCELLED: "Cancelled",
}


def initial_status(payment_method: PaymentMethodEnum) -> OrderStatusEnum:
    # Card orders wait for the payment callback
    return S.PENDING if PaymentMethodEnum(payment_method) == PaymentMethodEnum.CARD else S.CONFIRMED


def can_transition(current: OrderStatusEnum, target: OrderStatusEnum) -> bool:
    return OrderStatusEnum(target) in ALLOWED_TRANSITIONS[OrderStatusEnum(current)]


def ensure_transition(current: OrderStatusEnum, target: OrderStatusEnum) -> None:
    current, target = OrderStatusEnum(current), OrderStatusEnum(target)
    if not can_transition(current, target):
        raise InvalidTransitionError(
            f"Cannot change order status from {STATUS_LABELS[current]} to {STATUS_LABELS[target]}",
            errors={"from": current.value, "to": target.value},
        )


def ensure_cancellable(current: OrderStatusEnum) -> None:
    current = OrderStatusEnum(current)
    if current not in CANCELLABLE:
        raise InvalidTransitionError(
            f"Cannot cancel order with status: {STATUS_LABELS[current]}",
            errors={"from": current.value, "to": S.CANCELLED.value},
        )


def ensure_rateable(current: OrderStatusEnum) -> None:
    if OrderStatusEnum(current) != S.DELIVERED:
        raise InvalidStateError("Can only rate delivered orders", errors={"status": OrderStatusEnum(current).value})
