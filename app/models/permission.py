"""
Permission catalog and per-tenant role grants
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import UniqueConstraint
from datetime import datetime
from typing import Optional
import uuid


class Permission(SQLModel, table=True):
    """Global (resource, action) pair"""

    __tablename__ = "permissions"
    __table_args__ = (
        UniqueConstraint("resource", "action", name="uq_permission_resource_action"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    resource: str = Field(max_length=100)
    action: str = Field(max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)

    @property
    def key(self) -> str:
        return f"{self.resource}:{self.action}"


class RolePermission(SQLModel, table=True):
    """Grant of a permission to a role inside a tenant"""

    __tablename__ = "role_permissions"
    __table_args__ = (
        UniqueConstraint("tenant_id", "role", "permission_id", name="uq_role_permission"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", index=True)
    role: str = Field(max_length=30, index=True)
    permission_id: uuid.UUID = Field(foreign_key="permissions.id", index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
