import logging
from typing import Any, Dict, List

import httpx

from model.order import Order
from utils.config import settings
from utils.errors import UpstreamFailureError
from utils.pricing import to_minor_units

logger = logging.getLogger(__name__)


def build_line_items(order: Order) -> List[Dict[str, Any]]:
    """Order lines plus tax and delivery as pseudo line items, amounts in minor units."""
    line_items = [
        {
            "description": item.name,
            "category": item.category,
            "unit_amount": to_minor_units(item.unit_price),
            "quantity": item.quantity,
        }
        for item in order.items
    ]
    line_items.append({"description": "Tax (5%)", "unit_amount": to_minor_units(order.tax), "quantity": 1})
    line_items.append({"description": "Delivery Fee", "unit_amount": to_minor_units(order.delivery_fee), "quantity": 1})
    return line_items


class CheckoutGateway:
    """Client for the hosted checkout collaborator."""

    def __init__(self, url: str = None, api_key: str = None, timeout: float = None, transport: httpx.AsyncBaseTransport = None):
        self.url = url or settings.PAYMENT_GATEWAY_URL
        self.api_key = api_key if api_key is not None else settings.PAYMENT_GATEWAY_KEY
        self.timeout = timeout or settings.PAYMENT_TIMEOUT_SECONDS
        self.transport = transport

    def _payload(self, order: Order) -> Dict[str, Any]:
        base = settings.FRONTEND_URL.rstrip("/")
        return {
            "currency": settings.CURRENCY,
            "line_items": build_line_items(order),
            "discount_amount": to_minor_units(order.discount or 0),
            "amount_total": to_minor_units(order.amount),
            "success_url": f"{base}/verify?success=true&orderId={order.order_id}",
            "cancel_url": f"{base}/verify?success=false&orderId={order.order_id}",
            "metadata": {
                "order_id": str(order.order_id),
                "order_reference": order.order_reference,
                "user_id": str(order.user_id),
            },
        }

    async def create_checkout_session(self, order: Order) -> str:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.post(self.url, json=self._payload(order), headers=headers)
                resp.raise_for_status()
                data = resp.json()
        except httpx.TimeoutException:
            logger.warning("payment.timeout order=%s", order.order_id)
            raise UpstreamFailureError(
                "Payment gateway timed out; your order is saved as pending",
                errors={"order_id": order.order_id},
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("payment.error order=%s: %s", order.order_id, e)
            raise UpstreamFailureError(
                "Payment gateway unavailable; your order is saved as pending",
                errors={"order_id": order.order_id},
            )

        url = data.get("url") if isinstance(data, dict) else None
        if not url:
            raise UpstreamFailureError("Payment gateway returned no checkout url", errors={"order_id": order.order_id})
        return url


checkout_gateway = CheckoutGateway()


def get_payment_gateway() -> CheckoutGateway:
    return checkout_gateway
