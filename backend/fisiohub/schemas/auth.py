"""Pydantic schemas for authentication endpoints."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from fisiohub.models.user import UserRole
from fisiohub.schemas.common import Password, RequestModel
from fisiohub.schemas.tenant import TenantResponse
from fisiohub.schemas.user import UserResponse


class TenantKeyedRequest(RequestModel):
    """
    Body that may name its tenant.

    ``tenantSlug`` is the weakest tenant signal: host, path and header all
    win over it.
    """

    tenant_slug: Optional[str] = Field(
        None, alias="tenantSlug", min_length=1, max_length=255, description="Tenant slug or subdomain"
    )

    class Config:
        """Pydantic config."""

        populate_by_name = True


class LoginRequest(TenantKeyedRequest):
    """Credentials for one tenant."""

    email: EmailStr = Field(..., description="Login email")
    password: Password = Field(..., description="Password")


class RefreshRequest(TenantKeyedRequest):
    refresh_token: str = Field(..., min_length=1, description="Refresh token from login")


class TokenResponse(BaseModel):
    """Issued token pair plus the identity it belongs to."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    user: UserResponse
    tenant: TenantResponse


class MeResponse(BaseModel):
    """Identity behind the presented token."""

    id: UUID
    email: str
    full_name: str
    role: UserRole
    tenant_id: UUID
    tenant: TenantResponse


class MessageResponse(BaseModel):
    message: str
