"""
Unit tests for quote totals
"""

from decimal import Decimal
from types import SimpleNamespace

from app.services.totals import compute_totals, to_decimal


def item(quantity, unit_price, tax_rate=None, discount=None):
    return SimpleNamespace(quantity=quantity, unit_price=unit_price, tax_rate=tax_rate, discount=discount)


def charge(amount):
    return SimpleNamespace(amount=amount)


def test_single_taxed_item_with_charge():
    totals = compute_totals([item(2, Decimal("50.25"), Decimal("0.1"))], [charge(5)])

    assert totals.subtotal == Decimal("100.50")
    assert totals.tax_total == Decimal("10.05")
    assert totals.discount_total == Decimal("0.00")
    assert totals.charges_total == Decimal("5.00")
    assert totals.total == Decimal("115.55")


def test_float_inputs_are_exact():
    totals = compute_totals([item(2, 50.25, 0.1)], [charge(5.0)])
    assert totals.total == Decimal("115.55")


def test_discounts_are_subtracted():
    totals = compute_totals([item(1, 100, discount=Decimal("15.5"))])
    assert totals.discount_total == Decimal("15.50")
    assert totals.total == Decimal("84.50")


def test_empty_quote():
    totals = compute_totals([], None)
    assert totals.total == Decimal("0.00")


def test_item_order_does_not_matter():
    items = [
        item(3, Decimal("19.99"), Decimal("0.1")),
        item(1, Decimal("0.05"), Decimal("0.05")),
        item(7, Decimal("1.15"), None, Decimal("0.5")),
    ]
    forward = compute_totals(items, [charge(1), charge("2.5")])
    backward = compute_totals(list(reversed(items)), [charge("2.5"), charge(1)])
    assert forward == backward


def test_total_equals_sum_of_components():
    totals = compute_totals(
        [item(Decimal("1.333"), Decimal("7.77"), Decimal("0.19")), item(2, Decimal("0.015"), Decimal("0.1"))],
        [charge("0.004")],
    )
    assert totals.total == totals.subtotal + totals.tax_total - totals.discount_total + totals.charges_total


def test_to_decimal_from_float_uses_repr():
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal(None) is None
