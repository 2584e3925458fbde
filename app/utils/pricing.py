"""
Pricing calculator.

The one place where subtotal, tax, delivery fee and discount are combined.
Cart summary, promo validation and order placement all call into this module.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP
from typing import Iterable, Tuple, Union

TAX_RATE = Decimal("0.05")
DELIVERY_FEE = Decimal("50")
CENT = Decimal("0.01")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps 0.1 as 0.1 instead of its binary expansion
    return Decimal(str(value))


def round2(value: Number) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def floor2(value: Number) -> Decimal:
    """Truncate toward zero at two decimals (amounts here are never negative)."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_DOWN)


def line_total(unit_price: Number, quantity: int) -> Decimal:
    return to_decimal(unit_price) * quantity


def subtotal_of(lines: Iterable[Tuple[Number, int]]) -> Decimal:
    """Sum of ``unit_price * quantity`` over ``(unit_price, quantity)`` pairs."""
    total = Decimal("0")
    for unit_price, quantity in lines:
        total += line_total(unit_price, quantity)
    return round2(total)


def tax_for(subtotal: Number) -> Decimal:
    return round2(to_decimal(subtotal) * TAX_RATE)


def delivery_fee_for(subtotal: Number) -> Decimal:
    return DELIVERY_FEE if to_decimal(subtotal) > 0 else Decimal("0")


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Decimal
    tax: Decimal
    delivery_fee: Decimal
    discount: Decimal
    total: Decimal

    def as_dict(self) -> dict:
        return {
            "subtotal": float(self.subtotal),
            "tax": float(self.tax),
            "delivery_fee": float(self.delivery_fee),
            "discount": float(self.discount),
            "total": float(self.total),
        }


def price_order(subtotal: Number, discount: Number = 0) -> PriceBreakdown:
    """
    ``total = round2(subtotal + tax + delivery_fee - discount)``.

    The discount never eats into tax or delivery: it is capped at the subtotal.
    """
    subtotal = round2(subtotal)
    discount = min(round2(discount), subtotal)
    tax = tax_for(subtotal)
    fee = delivery_fee_for(subtotal)
    total = round2(subtotal + tax + fee - discount)
    return PriceBreakdown(subtotal=subtotal, tax=tax, delivery_fee=fee, discount=discount, total=total)


def to_minor_units(amount: Number) -> int:
    return int((round2(amount) * 100).to_integral_value(rounding=ROUND_HALF_UP))
