"""Pydantic schemas for request/response validation."""

from fisiohub.schemas.auth import LoginRequest, MeResponse, RefreshRequest, TokenResponse
from fisiohub.schemas.common import Page, PageParams, Pagination
from fisiohub.schemas.tenant import (
    TenantRegisterRequest,
    TenantResponse,
    TenantStatusResponse,
    TenantSuspendRequest,
    TenantUpdate,
)
from fisiohub.schemas.user import UserCreate, UserResponse, UserUpdate

__all__ = [
    "LoginRequest",
    "MeResponse",
    "RefreshRequest",
    "TokenResponse",
    "Page",
    "PageParams",
    "Pagination",
    "TenantRegisterRequest",
    "TenantResponse",
    "TenantStatusResponse",
    "TenantSuspendRequest",
    "TenantUpdate",
    "UserCreate",
    "UserResponse",
    "UserUpdate",
]
