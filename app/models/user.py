"""
User and membership models
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import UniqueConstraint
from datetime import datetime
from typing import Optional
import uuid
from enum import Enum


class MembershipRole(str, Enum):
    """Roles a user can hold inside a tenant"""
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class User(SQLModel, table=True):
    """Local user bound to an external auth subject"""

    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    auth_provider_id: str = Field(unique=True, index=True, max_length=255)
    email: str = Field(index=True, max_length=255)
    name: Optional[str] = Field(default=None, max_length=255)

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None


class Membership(SQLModel, table=True):
    """A user's role within one tenant"""

    __tablename__ = "memberships"
    __table_args__ = (
        UniqueConstraint("user_id", "tenant_id", name="uq_membership_user_tenant"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)
    tenant_id: int = Field(foreign_key="tenants.id", index=True, description="Tenant ID for multi-tenant isolation")
    role: MembershipRole = Field(default=MembershipRole.MEMBER, index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    @property
    def is_owner(self) -> bool:
        return self.role == MembershipRole.OWNER
