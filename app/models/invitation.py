"""
Invitation model for pending memberships
"""

from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional
from enum import Enum
import uuid

from app.models.user import MembershipRole


class InvitationState(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"


class Invitation(SQLModel, table=True):
    """Membership offer sent by email"""

    __tablename__ = "invitations"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", index=True)

    email: str = Field(max_length=255, index=True)
    role: MembershipRole = Field(default=MembershipRole.MEMBER)
    token: str = Field(unique=True, index=True, max_length=128)
    expires_at: datetime
    accepted_at: Optional[datetime] = None
    created_by_user_id: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")

    created_at: datetime = Field(default_factory=datetime.utcnow)

    def state(self, now: Optional[datetime] = None) -> InvitationState:
        """Accepted wins over expired"""
        if self.accepted_at is not None:
            return InvitationState.ACCEPTED
        if self.expires_at < (now or datetime.utcnow()):
            return InvitationState.EXPIRED
        return InvitationState.PENDING
