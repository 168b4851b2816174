"""
User Pydantic schemas.

Defines request and response schemas for account endpoints.
"""

from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional, Literal
from parcel_backend.app.models.enums import UserRole


class UserUpsert(BaseModel):
    """
    Schema for POST /users.

    Called by the client after every sign-in. There is no role field: new
    accounts always start as USER.
    """
    email: EmailStr = Field(..., description="User email address")
    name: Optional[str] = Field(None, max_length=150)
    photo_url: Optional[str] = Field(None, max_length=500)
    last_log_in: Optional[datetime] = None


class UserUpsertResponse(BaseModel):
    message: str
    inserted: bool
    user_id: int


class RoleResponse(BaseModel):
    role: UserRole


class RoleUpdate(BaseModel):
    """Only USER and ADMIN can be granted directly; RIDER comes from approval."""
    role: Literal["user", "admin"]


class RoleUpdateResponse(BaseModel):
    success: bool
    message: str


class UserResponse(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    role: UserRole
    created_at: datetime
    last_log_in: Optional[datetime] = None

    class Config:
        from_attributes = True


class LogoutResponse(BaseModel):
    revoked: bool
