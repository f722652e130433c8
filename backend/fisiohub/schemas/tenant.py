"""Pydantic schemas for Tenant API."""

from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field

from fisiohub.models.tenant import TenantPlan, TenantStatus
from fisiohub.schemas.common import SLUG_PATTERN, Password, RequestModel, ResponseModel, UTCDateTime

SUBDOMAIN_PATTERN = r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$"
DOMAIN_PATTERN = r"^([a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,63}$"


class TenantRegisterRequest(RequestModel):
    """Self-service registration: a new tenant and its first admin."""

    name: str = Field(..., min_length=2, max_length=255, description="Organization name")
    slug: str = Field(..., pattern=SLUG_PATTERN, description="URL-safe identifier")
    subdomain: Optional[str] = Field(None, pattern=SUBDOMAIN_PATTERN, description="DNS label")
    custom_domain: Optional[str] = Field(
        None, min_length=4, max_length=255, pattern=DOMAIN_PATTERN, description="Custom domain"
    )
    plan: TenantPlan = Field(TenantPlan.BASIC, description="Subscription plan")
    contact_email: Optional[EmailStr] = Field(None, description="Primary contact email")

    admin_name: str = Field(..., min_length=2, max_length=255, description="Admin full name")
    admin_email: EmailStr = Field(..., description="Admin login email")
    admin_password: Password = Field(..., description="Admin password")


class TenantUpdate(RequestModel):
    """Fields an admin may change on the current tenant."""

    name: Optional[str] = Field(None, min_length=2, max_length=255)
    plan: Optional[TenantPlan] = None
    contact_email: Optional[EmailStr] = None


class TenantSuspendRequest(RequestModel):
    reason: str = Field(..., min_length=3, max_length=1000, description="Why the tenant is suspended")


class TenantResponse(ResponseModel):
    """Tenant as seen by its own members."""

    id: UUID
    name: str
    slug: str
    subdomain: Optional[str] = None
    custom_domain: Optional[str] = None
    status: TenantStatus
    plan: TenantPlan
    contact_email: Optional[str] = None
    trial_ends_at: Optional[UTCDateTime] = None
    created_at: UTCDateTime


class TenantStatusResponse(ResponseModel):
    """Public tenant status (login pages use it to show suspension notices)."""

    slug: str
    name: str
    status: TenantStatus
    is_active: bool
    suspension_reason: Optional[str] = None
