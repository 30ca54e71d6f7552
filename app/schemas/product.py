"""
Pydantic schemas for products and product templates
"""

from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
import uuid

from app.schemas.common import Number, PageMeta


class ProductCreate(BaseModel):
    """Product creation payload"""
    sku: Optional[str] = Field(default=None, max_length=100)
    name: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, max_length=2000)
    unit: Optional[str] = Field(default=None, max_length=50)
    price: Decimal = Field(default=Decimal("0"), ge=0)
    cost: Optional[Decimal] = Field(default=None, ge=0)
    tax_rate: Optional[Decimal] = Field(default=None, ge=0, le=1)
    price_includes_tax: bool = False
    stock: Optional[Decimal] = None
    min_stock: Optional[Decimal] = None
    template_id: Optional[uuid.UUID] = None
    attributes: Optional[Dict[str, Any]] = None


class ProductUpdate(BaseModel):
    sku: Optional[str] = Field(default=None, max_length=100)
    name: Optional[str] = Field(default=None, min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, max_length=2000)
    unit: Optional[str] = Field(default=None, max_length=50)
    price: Optional[Decimal] = Field(default=None, ge=0)
    cost: Optional[Decimal] = Field(default=None, ge=0)
    tax_rate: Optional[Decimal] = Field(default=None, ge=0, le=1)
    price_includes_tax: Optional[bool] = None
    stock: Optional[Decimal] = None
    min_stock: Optional[Decimal] = None
    template_id: Optional[uuid.UUID] = None
    attributes: Optional[Dict[str, Any]] = None


class ProductRead(BaseModel):
    id: uuid.UUID
    sku: Optional[str] = None
    name: str
    description: Optional[str] = None
    unit: Optional[str] = None
    price: Number = None
    cost: Number = None
    tax_rate: Number = None
    price_includes_tax: bool = False
    stock: Number = None
    min_stock: Number = None
    template_id: Optional[uuid.UUID] = None
    attributes: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProductListResponse(PageMeta):
    data: List[ProductRead]


class ProductTemplateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    attributes: Dict[str, Any] = Field(default_factory=dict)


class ProductTemplateUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    attributes: Optional[Dict[str, Any]] = None


class ProductTemplateRead(BaseModel):
    id: uuid.UUID
    name: str
    attributes: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProductTemplateListResponse(PageMeta):
    data: List[ProductTemplateRead]
