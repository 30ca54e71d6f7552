"""
Quote aggregate models: quote, items, additional charges, status history
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import UniqueConstraint
from decimal import Decimal
from datetime import datetime
from typing import Optional
from enum import Enum
import uuid


class QuoteStatus(str, Enum):
    """Lifecycle status of a quote"""
    DRAFT = "DRAFT"
    OPEN = "OPEN"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"
    INVOICED = "INVOICED"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            normalized = value.strip()
            alias = LEGACY_STATUS_ALIASES.get(normalized.lower())
            if alias is not None:
                return cls(alias)
            upper = normalized.upper()
            if upper in cls.__members__:
                return cls[upper]
        return None


# Lowercase vocabulary still sent by older clients and stored in older rows
LEGACY_STATUS_ALIASES = {
    "draft": "DRAFT",
    "sent": "OPEN",
    "accepted": "APPROVED",
    "rejected": "REJECTED",
    "expired": "EXPIRED",
}


class Quote(SQLModel, table=True):
    """Price proposal aggregate root"""

    __tablename__ = "quotes"
    __table_args__ = (
        UniqueConstraint("tenant_id", "sequence", name="uq_quote_tenant_sequence"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", index=True, description="Tenant ID for multi-tenant isolation")

    sequence: int = Field(default=1, description="Per-tenant running number")
    number: Optional[str] = Field(default=None, max_length=30, index=True)
    status: QuoteStatus = Field(default=QuoteStatus.DRAFT, index=True)

    # Customer references (snapshots + optional links)
    customer_id: Optional[uuid.UUID] = Field(default=None, foreign_key="clients.id", index=True)
    customer_name: str = Field(max_length=255)
    branch_id: Optional[uuid.UUID] = Field(default=None, foreign_key="client_branches.id")
    branch_name: Optional[str] = Field(default=None, max_length=255)

    issue_date: Optional[datetime] = None
    due_date: Optional[datetime] = Field(default=None, index=True)
    currency: Optional[str] = Field(default=None, max_length=10)
    notes: Optional[str] = None
    print_notes: Optional[bool] = None

    # Computed totals
    subtotal: Optional[Decimal] = Field(default=None, max_digits=16, decimal_places=2)
    tax_total: Optional[Decimal] = Field(default=None, max_digits=16, decimal_places=2)
    discount_total: Optional[Decimal] = Field(default=None, max_digits=16, decimal_places=2)
    total: Optional[Decimal] = Field(default=None, max_digits=16, decimal_places=2)

    # Public link
    public_id: str = Field(unique=True, index=True, max_length=64)
    public_enabled: bool = Field(default=True)

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: Optional[datetime] = None


class QuoteItem(SQLModel, table=True):
    """Line item owned by one quote"""

    __tablename__ = "quote_items"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", index=True)
    quote_id: uuid.UUID = Field(foreign_key="quotes.id", index=True)
    product_id: Optional[uuid.UUID] = Field(default=None, foreign_key="products.id")

    description: str = Field(max_length=2000)
    quantity: Decimal = Field(max_digits=14, decimal_places=3)
    unit_price: Decimal = Field(max_digits=14, decimal_places=2)
    discount: Optional[Decimal] = Field(default=None, max_digits=14, decimal_places=2)
    tax_rate: Optional[Decimal] = Field(default=None, max_digits=5, decimal_places=4)
    position: int = Field(default=0)


class QuoteAdditionalCharge(SQLModel, table=True):
    """Named charge added after the item subtotal"""

    __tablename__ = "quote_additional_charges"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", index=True)
    quote_id: uuid.UUID = Field(foreign_key="quotes.id", index=True)

    type: str = Field(max_length=100)
    amount: Decimal = Field(max_digits=14, decimal_places=2)
    position: int = Field(default=0)


class QuoteStatusHistory(SQLModel, table=True):
    """Append-only record of a status transition"""

    __tablename__ = "quote_status_history"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", index=True)
    quote_id: uuid.UUID = Field(foreign_key="quotes.id", index=True)

    from_status: Optional[QuoteStatus] = None
    to_status: QuoteStatus
    reason: Optional[str] = Field(default=None, max_length=1000)
    changed_by: str = Field(max_length=255)

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
