"""
Pydantic schemas for quotes
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional
import uuid

from app.models.quote import QuoteStatus
from app.schemas.common import Number, PageMeta
from app.services.totals import quantize_places


def _naive_utc(value):
    # Timestamps are stored as naive UTC
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _normalize_status(value):
    # Accept both the canonical and the legacy lowercase vocabulary
    if value is None or isinstance(value, QuoteStatus):
        return value
    try:
        return QuoteStatus(value)
    except ValueError:
        return value


class QuoteItemInput(BaseModel):
    product_id: Optional[uuid.UUID] = None
    description: str = Field(..., min_length=1)
    quantity: Decimal = Field(..., ge=0)
    unit_price: Decimal = Field(..., ge=0)
    discount: Optional[Decimal] = Field(default=None, ge=0)
    tax_rate: Optional[Decimal] = Field(default=None, ge=0, le=1)

    @field_validator("quantity", mode="after")
    @classmethod
    def round_quantity(cls, value):
        return quantize_places(value, 3)

    @field_validator("unit_price", "discount", mode="after")
    @classmethod
    def round_money(cls, value):
        return quantize_places(value, 2)

    @field_validator("tax_rate", mode="after")
    @classmethod
    def round_rate(cls, value):
        return quantize_places(value, 4)


class AdditionalChargeInput(BaseModel):
    type: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., ge=0)

    @field_validator("amount", mode="after")
    @classmethod
    def round_amount(cls, value):
        return quantize_places(value, 2)


class QuoteCreate(BaseModel):
    """Quote creation payload"""
    status: Optional[QuoteStatus] = None
    customer_id: Optional[uuid.UUID] = None
    customer_name: str = Field(..., min_length=1, max_length=255)
    branch_id: Optional[uuid.UUID] = None
    branch_name: Optional[str] = Field(default=None, max_length=255)
    issue_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    currency: Optional[str] = Field(default=None, max_length=10)
    notes: Optional[str] = None
    print_notes: Optional[bool] = None
    items: List[QuoteItemInput] = Field(default_factory=list)
    additional_charges: Optional[List[AdditionalChargeInput]] = None

    normalize_status = field_validator("status", mode="before")(_normalize_status)
    normalize_dates = field_validator("issue_date", "due_date", mode="after")(_naive_utc)


class QuoteUpdate(BaseModel):
    """Partial quote update; items / additional_charges replace the stored set"""
    status: Optional[QuoteStatus] = None
    customer_id: Optional[uuid.UUID] = None
    customer_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    branch_id: Optional[uuid.UUID] = None
    branch_name: Optional[str] = Field(default=None, max_length=255)
    issue_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    currency: Optional[str] = Field(default=None, max_length=10)
    notes: Optional[str] = None
    print_notes: Optional[bool] = None
    items: Optional[List[QuoteItemInput]] = None
    additional_charges: Optional[List[AdditionalChargeInput]] = None

    normalize_status = field_validator("status", mode="before")(_normalize_status)
    normalize_dates = field_validator("issue_date", "due_date", mode="after")(_naive_utc)


class QuoteStatusChange(BaseModel):
    status: QuoteStatus
    reason: Optional[str] = Field(default=None, max_length=1000)

    normalize_status = field_validator("status", mode="before")(_normalize_status)


class PublicLinkToggle(BaseModel):
    enabled: bool


class QuoteItemRead(BaseModel):
    id: uuid.UUID
    product_id: Optional[uuid.UUID] = None
    description: str
    quantity: Number = None
    unit_price: Number = None
    discount: Number = None
    tax_rate: Number = None
    position: int = 0

    class Config:
        from_attributes = True


class AdditionalChargeRead(BaseModel):
    id: uuid.UUID
    type: str
    amount: Number = None
    position: int = 0

    class Config:
        from_attributes = True


class QuoteRead(BaseModel):
    id: uuid.UUID
    tenant_id: int
    number: Optional[str] = None
    status: QuoteStatus
    customer_id: Optional[uuid.UUID] = None
    customer_name: str
    branch_id: Optional[uuid.UUID] = None
    branch_name: Optional[str] = None
    issue_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    currency: Optional[str] = None
    notes: Optional[str] = None
    print_notes: Optional[bool] = None
    subtotal: Number = None
    tax_total: Number = None
    discount_total: Number = None
    total: Number = None
    public_id: str
    public_enabled: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    items: List[QuoteItemRead] = Field(default_factory=list)
    additional_charges: List[AdditionalChargeRead] = Field(default_factory=list)


class QuoteListResponse(PageMeta):
    data: List[QuoteRead]


class PublicLinkRead(BaseModel):
    id: uuid.UUID
    public_id: str
    public_enabled: bool


class QuoteStatusHistoryRead(BaseModel):
    id: uuid.UUID
    quote_id: uuid.UUID
    from_status: Optional[QuoteStatus] = None
    to_status: QuoteStatus
    reason: Optional[str] = None
    changed_by: str
    created_at: datetime

    class Config:
        from_attributes = True


class PublicQuoteItem(BaseModel):
    id: uuid.UUID
    description: str
    quantity: Number = None
    unit_price: Number = None
    discount: Number = None
    tax_rate: Number = None


class PublicAdditionalCharge(BaseModel):
    id: uuid.UUID
    type: str
    amount: Number = None


class PublicQuoteRead(BaseModel):
    """Unauthenticated view of a quote"""
    id: uuid.UUID
    number: Optional[str] = None
    status: Optional[str] = None
    customer_name: str
    branch_name: Optional[str] = None
    issue_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    currency: Optional[str] = None
    notes: Optional[str] = None
    print_notes: Optional[bool] = None
    subtotal: Number = None
    tax_total: Number = None
    discount_total: Number = None
    total: Number = None
    items: List[PublicQuoteItem] = Field(default_factory=list)
    additional_charges: List[PublicAdditionalCharge] = Field(default_factory=list)
