"""
Unit tests for numeric sanitization of public quote payloads
"""

from decimal import Decimal
from types import SimpleNamespace
import uuid

from app.models.quote import QuoteStatus
from app.services.sanitize import sanitize_quote, to_number


def test_numeric_strings_become_numbers():
    assert to_number("100.50") == 100.5
    assert to_number("0.1") == 0.1
    assert to_number(" 42 ") == 42.0


def test_none_stays_none():
    assert to_number(None) is None


def test_decimal_and_int_inputs():
    assert to_number(Decimal("115.55")) == 115.55
    assert to_number(3) == 3.0


def test_garbage_becomes_none():
    assert to_number("abc") is None
    assert to_number("NaN") is None
    assert to_number(True) is None


def test_sanitize_quote_shape():
    """Public view drops internal references and coerces every money field"""
    quote = SimpleNamespace(
        id=uuid.uuid4(),
        tenant_id=7,
        customer_id=uuid.uuid4(),
        number="000001",
        status=QuoteStatus.OPEN,
        customer_name="Cliente",
        branch_name=None,
        issue_date=None,
        due_date=None,
        currency="PYG",
        notes=None,
        print_notes=True,
        subtotal="100.50",
        tax_total=None,
        discount_total=Decimal("0"),
        total=Decimal("100.50"),
    )
    item = {"id": uuid.uuid4(), "description": "Item", "quantity": "2", "unit_price": "50.25",
            "discount": None, "tax_rate": "0.1"}
    charge = {"id": uuid.uuid4(), "type": "Flete", "amount": "5"}

    view = sanitize_quote(quote, [item], [charge])

    assert view["status"] == "OPEN"
    assert view["subtotal"] == 100.5
    assert view["tax_total"] is None
    assert view["discount_total"] == 0.0
    assert "tenant_id" not in view
    assert "customer_id" not in view
    assert view["items"][0]["quantity"] == 2.0
    assert view["items"][0]["discount"] is None
    assert view["items"][0]["tax_rate"] == 0.1
    assert view["additional_charges"][0]["amount"] == 5.0
