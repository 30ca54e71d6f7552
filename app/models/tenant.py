"""
Tenant model - Multi-tenancy foundation
"""

from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional
import uuid


class Tenant(SQLModel, table=True):
    """Organization owning every tenant-scoped record"""

    __tablename__ = "tenants"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, max_length=80)
    slug: str = Field(unique=True, index=True, max_length=40, description="Unique organization handle")
    # Storage key of the logo (e.g. "kusystem/my-org/logo.png"), not a URL
    logo_url: Optional[str] = Field(default=None, max_length=500)

    created_by_user_id: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id", nullable=True)

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None
