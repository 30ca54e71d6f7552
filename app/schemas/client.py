"""
Pydantic schemas for clients and client branches
"""

from pydantic import BaseModel, Field, EmailStr
from datetime import datetime
from typing import List, Optional
import uuid

from app.schemas.common import PageMeta


class ClientCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    tax_id: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=100)
    email: Optional[EmailStr] = None


class ClientUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    tax_id: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=100)
    email: Optional[EmailStr] = None


class ClientRead(BaseModel):
    id: uuid.UUID
    name: str
    tax_id: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ClientListResponse(PageMeta):
    data: List[ClientRead]


class BranchCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: Optional[str] = Field(default=None, max_length=500)


class BranchUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    address: Optional[str] = Field(default=None, max_length=500)


class BranchRead(BaseModel):
    id: uuid.UUID
    client_id: uuid.UUID
    name: str
    address: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BranchListResponse(PageMeta):
    data: List[BranchRead]
