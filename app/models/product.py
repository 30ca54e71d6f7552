"""
Product catalog models
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import Column, JSON
from decimal import Decimal
from datetime import datetime
from typing import Optional, Dict, Any
import uuid


# Placeholder product used for ad-hoc quote lines
GENERIC_PRODUCT_SKU = "CUSTOM-ITEM-001"


class ProductTemplate(SQLModel, table=True):
    """Attribute definition shared by a family of products"""

    __tablename__ = "product_templates"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", index=True)
    name: str = Field(index=True, max_length=255)
    attributes: Dict[str, Any] = Field(
        default_factory=dict,
        description="Field definitions (JSON)",
        sa_column=Column(JSON, nullable=False),
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None


class Product(SQLModel, table=True):
    """Catalog item with tenant isolation"""

    __tablename__ = "products"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", index=True, description="Tenant ID for multi-tenant isolation")

    sku: Optional[str] = Field(default=None, index=True, max_length=100)
    name: str = Field(index=True, max_length=500)
    description: Optional[str] = Field(default=None, max_length=2000)
    unit: Optional[str] = Field(default=None, max_length=50)

    # Pricing
    price: Decimal = Field(default=Decimal("0.00"), max_digits=14, decimal_places=2)
    cost: Optional[Decimal] = Field(default=None, max_digits=14, decimal_places=2)
    tax_rate: Optional[Decimal] = Field(default=None, max_digits=5, decimal_places=4, description="0..1")
    price_includes_tax: bool = Field(default=False)

    # Stock (None disables stock tracking)
    stock: Optional[Decimal] = Field(default=None, max_digits=14, decimal_places=2)
    min_stock: Optional[Decimal] = Field(default=None, max_digits=14, decimal_places=2)

    template_id: Optional[uuid.UUID] = Field(default=None, foreign_key="product_templates.id", index=True)
    attributes: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: Optional[datetime] = None
