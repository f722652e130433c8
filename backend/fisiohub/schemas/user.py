"""Pydantic schemas for User API."""

from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field

from fisiohub.models.user import UserRole
from fisiohub.schemas.common import Password, RequestModel, ResponseModel, UTCDateTime


class UserCreate(RequestModel):
    """Schema for creating (inviting) a user into the current tenant."""

    email: EmailStr = Field(..., description="Login email, unique in the tenant")
    password: Password = Field(..., description="Initial password")
    full_name: str = Field(..., min_length=2, max_length=255)
    role: UserRole = Field(UserRole.THERAPIST, description="Role for RBAC")
    phone: Optional[str] = Field(None, max_length=50)
    specialty: Optional[str] = Field(None, max_length=100)
    professional_registry: Optional[str] = Field(None, max_length=100, description="e.g. CREFITO")


class UserUpdate(RequestModel):
    full_name: Optional[str] = Field(None, min_length=2, max_length=255)
    role: Optional[UserRole] = None
    phone: Optional[str] = Field(None, max_length=50)
    specialty: Optional[str] = Field(None, max_length=100)
    professional_registry: Optional[str] = Field(None, max_length=100)


class UserResponse(ResponseModel):
    """User without credentials."""

    id: UUID
    email: str
    full_name: str
    role: UserRole
    is_active: bool
    phone: Optional[str] = None
    specialty: Optional[str] = None
    professional_registry: Optional[str] = None
    last_login_at: Optional[UTCDateTime] = None
    created_at: UTCDateTime
