"""
Quote totals computation

Money is handled as Decimal and every component is quantized to cents with
ROUND_HALF_UP. The total is derived from the quantized components so that
total == subtotal + tax_total - discount_total + charges_total holds exactly
on the stored values.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, NamedTuple, Optional

CENT = Decimal("0.01")
ZERO = Decimal("0")


class QuoteTotals(NamedTuple):
    subtotal: Decimal
    tax_total: Decimal
    discount_total: Decimal
    charges_total: Decimal
    total: Decimal


def to_decimal(value: Any) -> Optional[Decimal]:
    """Decimal from Decimal/int/float/str; floats go through their repr"""
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def quantize_places(value: Optional[Decimal], places: int) -> Optional[Decimal]:
    """Round to the scale a column stores"""
    if value is None:
        return None
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def compute_totals(items: Iterable[Any], additional_charges: Optional[Iterable[Any]] = None) -> QuoteTotals:
    """
    Compute quote totals from line items and additional charges.

    Items need quantity, unit_price and optional tax_rate / discount
    attributes; charges need amount. Absent tax rates and discounts count
    as zero.
    """
    subtotal = ZERO
    tax_total = ZERO
    discount_total = ZERO

    for item in items:
        line = to_decimal(item.quantity) * to_decimal(item.unit_price)
        subtotal += line
        tax_rate = to_decimal(getattr(item, "tax_rate", None))
        if tax_rate:
            tax_total += line * tax_rate
        discount = to_decimal(getattr(item, "discount", None))
        if discount:
            discount_total += discount

    charges_total = sum((to_decimal(charge.amount) for charge in additional_charges or []), ZERO)

    subtotal = quantize_money(subtotal)
    tax_total = quantize_money(tax_total)
    discount_total = quantize_money(discount_total)
    charges_total = quantize_money(charges_total)

    return QuoteTotals(
        subtotal=subtotal,
        tax_total=tax_total,
        discount_total=discount_total,
        charges_total=charges_total,
        total=subtotal + tax_total - discount_total + charges_total,
    )
