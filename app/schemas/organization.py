"""
Pydantic schemas for organizations and invitations
"""

from pydantic import BaseModel, Field, EmailStr
from datetime import datetime
from typing import List, Literal, Optional
import uuid

from app.models.user import MembershipRole


class OrganizationCreate(BaseModel):
    """Organization signup payload"""
    name: str = Field(..., min_length=2, max_length=80)
    slug: str = Field(..., min_length=3, max_length=40, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    logo_url: Optional[str] = Field(default=None, min_length=3, max_length=500)


class OrganizationRead(BaseModel):
    id: int
    name: str
    slug: str
    logo_url: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class OrganizationCreated(BaseModel):
    tenant: OrganizationRead
    membership_id: uuid.UUID
    role: MembershipRole


class MyOrganization(BaseModel):
    membership_id: uuid.UUID
    role: MembershipRole
    tenant: OrganizationRead


class InvitationCreate(BaseModel):
    email: EmailStr
    role: Literal["admin", "member"] = "member"


class InvitationCreated(BaseModel):
    ok: bool = True
    id: uuid.UUID
    token: str
    invite_url: str


class InvitationOrganization(BaseModel):
    id: int
    name: str


class InvitationRead(BaseModel):
    email: str
    role: MembershipRole
    expires_at: datetime
    organization: InvitationOrganization


class InvitationAccepted(BaseModel):
    ok: bool = True
    tenant_id: int


class MyOrganizationList(BaseModel):
    data: List[MyOrganization]
