"""Tenant API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from fisiohub.api.dependencies import DbSession, Hasher, get_identity_store, get_tenant_resolver
from fisiohub.api.dependencies.auth import require_access
from fisiohub.api.v1.endpoints.auth import register_tenant
from fisiohub.models.tenant import Tenant
from fisiohub.schemas.auth import TokenResponse
from fisiohub.schemas.tenant import (
    TenantResponse,
    TenantStatusResponse,
    TenantSuspendRequest,
    TenantUpdate,
)
from fisiohub.services.auth_gate import AccessContext
from fisiohub.services.identity_store import IdentityStore
from fisiohub.services.tenant_resolver import TenantResolver
from fisiohub.services.tenants import TenantService

router = APIRouter(prefix="/tenants")

Store = Annotated[IdentityStore, Depends(get_identity_store)]

router.add_api_route(
    "/register",
    register_tenant,
    methods=["POST"],
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register tenant",
)


@router.get("/current", response_model=TenantResponse, summary="Current tenant")
async def get_current(
    access: Annotated[AccessContext, Depends(require_access("tenant:read"))],
) -> TenantResponse:
    return TenantResponse.model_validate(access.tenant)


@router.patch("/current", response_model=TenantResponse, summary="Update current tenant")
async def update_current(
    data: TenantUpdate,
    access: Annotated[AccessContext, Depends(require_access("tenant:manage"))],
    db: DbSession,
    store: Store,
    hasher: Hasher,
) -> TenantResponse:
    tenant = await TenantService(db, store, hasher).update(access.tenant, data, access.user_id)
    await db.commit()
    return TenantResponse.model_validate(tenant)


@router.post("/current/suspend", response_model=TenantStatusResponse, summary="Suspend current tenant")
async def suspend_current(
    data: TenantSuspendRequest,
    access: Annotated[AccessContext, Depends(require_access("tenant:manage"))],
    db: DbSession,
    store: Store,
    hasher: Hasher,
) -> TenantStatusResponse:
    """
    Suspend the tenant. Afterwards only the status inquiry and reactivation
    still resolve it.
    """
    tenant = await TenantService(db, store, hasher).suspend(access.tenant, data.reason, access.user_id)
    await db.commit()
    return status_response(tenant)


@router.post(
    "/current/reactivate",
    response_model=TenantStatusResponse,
    summary="Reactivate current tenant",
)
async def reactivate_current(
    access: Annotated[
        AccessContext, Depends(require_access("tenant:manage", allow_suspended=True))
    ],
    db: DbSession,
    store: Store,
    hasher: Hasher,
) -> TenantStatusResponse:
    tenant = await TenantService(db, store, hasher).reactivate(access.tenant, access.user_id)
    await db.commit()
    return status_response(tenant)


@router.get(
    "/{slug}/status",
    response_model=TenantStatusResponse,
    summary="Public tenant status",
    description="Unauthenticated; also answers for suspended tenants.",
)
async def tenant_status(
    slug: str,
    resolver: Annotated[TenantResolver, Depends(get_tenant_resolver)],
) -> TenantStatusResponse:
    tenant = await resolver.resolve_key(slug, allow_suspended=True)
    return status_response(tenant)


def status_response(tenant: Tenant) -> TenantStatusResponse:
    return TenantStatusResponse(
        slug=tenant.slug,
        name=tenant.name,
        status=tenant.status,
        is_active=not tenant.is_suspended,
        suspension_reason=tenant.suspension_reason,
    )
