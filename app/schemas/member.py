"""
Pydantic schemas for members and role permissions
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Dict, List, Optional
import uuid

from app.models.user import MembershipRole


class MemberUser(BaseModel):
    id: uuid.UUID
    email: str
    name: Optional[str] = None


class MemberRead(BaseModel):
    membership_id: uuid.UUID
    role: MembershipRole
    created_at: datetime
    user: MemberUser


class MyPermissionsRead(BaseModel):
    role: MembershipRole
    permissions: List[str]
    can_manage_permissions: bool


class PermissionRead(BaseModel):
    id: uuid.UUID
    resource: str
    action: str
    key: str
    description: Optional[str] = None


class RolesOverview(BaseModel):
    """Catalog, grants per role and members, for the permissions screen"""
    permissions: List[PermissionRead]
    roles: Dict[str, List[str]]
    members: List[MemberRead]


class RolePermissionsUpdate(BaseModel):
    permissions: List[str] = Field(default_factory=list)

    class Config:
        json_schema_extra = {"example": {"permissions": ["quotes:view", "clients:view"]}}


class RolePermissionsRead(BaseModel):
    role: MembershipRole
    permissions: List[str]


class MembershipRoleUpdate(BaseModel):
    role: MembershipRole


class MembershipRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    tenant_id: int
    role: MembershipRole
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
