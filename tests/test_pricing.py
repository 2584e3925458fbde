from decimal import Decimal

import pytest

from utils.pricing import (
    DELIVERY_FEE,
    floor2,
    price_order,
    round2,
    subtotal_of,
    tax_for,
    to_minor_units,
)


def test_two_items_at_hundred_without_promo():
    subtotal = subtotal_of([(Decimal("100"), 2)])
    breakdown = price_order(subtotal)

    assert breakdown.subtotal == Decimal("200.00")
    assert breakdown.tax == Decimal("10.00")
    assert breakdown.delivery_fee == DELIVERY_FEE
    assert breakdown.discount == Decimal("0.00")
    assert breakdown.total == Decimal("260.00")


def test_fixed_discount_comes_off_the_total():
    assert price_order(Decimal("200"), Decimal("50")).total == Decimal("210.00")


def test_empty_subtotal_has_no_delivery_fee():
    breakdown = price_order(0)
    assert breakdown.delivery_fee == 0
    assert breakdown.total == Decimal("0.00")


def test_discount_is_capped_at_subtotal():
    breakdown = price_order(Decimal("30"), Decimal("100"))
    assert breakdown.discount == Decimal("30.00")
    # tax and delivery are still owed
    assert breakdown.total == Decimal("51.50")


@pytest.mark.parametrize("subtotal", ["0.10", "19.99", "123.45", "999.99"])
def test_total_matches_closed_form(subtotal):
    s = Decimal(subtotal)
    expected = round2(s + s * Decimal("0.05") + (50 if s > 0 else 0))
    assert price_order(s).total == expected


def test_subtotal_accepts_floats_without_binary_noise():
    assert subtotal_of([(0.1, 3)]) == Decimal("0.30")


def test_tax_rounds_half_up():
    # 0.05 * 10.10 = 0.505
    assert tax_for(Decimal("10.10")) == Decimal("0.51")


def test_floor2_truncates():
    assert floor2(Decimal("12.349")) == Decimal("12.34")
    assert round2(Decimal("12.345")) == Decimal("12.35")


def test_minor_units():
    assert to_minor_units(Decimal("260")) == 26000
    assert to_minor_units("10.5") == 1050


def test_breakdown_as_dict_is_json_friendly():
    data = price_order(Decimal("200")).as_dict()
    assert data == {"subtotal": 200.0, "tax": 10.0, "delivery_fee": 50.0, "discount": 0.0, "total": 260.0}
