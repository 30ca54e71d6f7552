"""
Numeric coercion for outgoing quote payloads
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, Optional
import math


def to_number(value: Any) -> Optional[float]:
    """
    Coerce Decimal, numeric strings and numbers to float.

    None stays None (never 0). Unparseable or non-finite values become None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(Decimal(str(value).strip()))
        except (InvalidOperation, ValueError):
            return None
    return number if math.isfinite(number) else None


def _get(source: Any, name: str, default: Any = None) -> Any:
    if isinstance(source, dict):
        return source.get(name, default)
    return getattr(source, name, default)


def sanitize_item(item: Any) -> Dict[str, Any]:
    return {
        "id": _get(item, "id"),
        "description": _get(item, "description"),
        "quantity": to_number(_get(item, "quantity")),
        "unit_price": to_number(_get(item, "unit_price")),
        "discount": to_number(_get(item, "discount")),
        "tax_rate": to_number(_get(item, "tax_rate")),
    }


def sanitize_charge(charge: Any) -> Dict[str, Any]:
    return {
        "id": _get(charge, "id"),
        "type": _get(charge, "type"),
        "amount": to_number(_get(charge, "amount")),
    }


def sanitize_quote(
    quote: Any,
    items: Iterable[Any] = (),
    additional_charges: Iterable[Any] = (),
) -> Dict[str, Any]:
    """Public view of a quote: plain numbers, no internal references"""
    status = _get(quote, "status")
    return {
        "id": _get(quote, "id"),
        "number": _get(quote, "number"),
        "status": getattr(status, "value", status),
        "customer_name": _get(quote, "customer_name"),
        "branch_name": _get(quote, "branch_name"),
        "issue_date": _get(quote, "issue_date"),
        "due_date": _get(quote, "due_date"),
        "currency": _get(quote, "currency"),
        "notes": _get(quote, "notes"),
        "print_notes": _get(quote, "print_notes"),
        "subtotal": to_number(_get(quote, "subtotal")),
        "tax_total": to_number(_get(quote, "tax_total")),
        "discount_total": to_number(_get(quote, "discount_total")),
        "total": to_number(_get(quote, "total")),
        "items": [sanitize_item(item) for item in items],
        "additional_charges": [sanitize_charge(charge) for charge in additional_charges],
    }
