"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from fisiohub.api.dependencies import (
    AppSettings,
    CurrentIdentity,
    DbSession,
    Hasher,
    Resolver,
    Tokens,
    get_identity_store,
)
from fisiohub.schemas.auth import (
    LoginRequest,
    MeResponse,
    MessageResponse,
    RefreshRequest,
    TokenResponse,
)
from fisiohub.schemas.tenant import TenantRegisterRequest, TenantResponse
from fisiohub.schemas.user import UserResponse
from fisiohub.services.auth import AuthService, IssuedTokens
from fisiohub.services.identity_store import IdentityStore
from fisiohub.services.tenants import TenantService

router = APIRouter(prefix="/auth")

Store = Annotated[IdentityStore, Depends(get_identity_store)]


def token_response(issued: IssuedTokens) -> TokenResponse:
    return TokenResponse(
        access_token=issued.access_token,
        refresh_token=issued.refresh_token,
        expires_in=issued.expires_in,
        user=UserResponse.model_validate(issued.user),
        tenant=TenantResponse.model_validate(issued.tenant),
    )


async def register_tenant(
    data: TenantRegisterRequest,
    db: DbSession,
    store: Store,
    hasher: Hasher,
    tokens: Tokens,
    settings: AppSettings,
) -> TokenResponse:
    """
    Register a new tenant with its first admin user.

    Tenant and admin are created in one transaction. The response carries a
    token pair for the admin so the client is logged in right away.

    Raises:
        409: Slug, subdomain or domain already taken
    """
    service = TenantService(db, store, hasher, trial_days=settings.TENANT_TRIAL_DAYS)
    tenant, admin = await service.register(data)
    await db.commit()

    return token_response(AuthService(store, hasher, tokens).issue(admin, tenant))


router.add_api_route(
    "/register",
    register_tenant,
    methods=["POST"],
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register tenant",
)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Log in to the resolved tenant",
    description=(
        "The tenant comes from the host, the /t/<slug> path or the tenant header; "
        "a tenantSlug in the body is used only when none of those is present."
    ),
)
async def login(
    request: Request,
    data: LoginRequest,
    resolver: Resolver,
    db: DbSession,
    store: Store,
    hasher: Hasher,
    tokens: Tokens,
) -> TokenResponse:
    """
    Exchange credentials for an access and a refresh token.

    Raises:
        404: Tenant not resolved
        401: Invalid email or password
    """
    tenant = await resolver.resolve(request, fallback_key=data.tenant_slug)
    issued = await AuthService(store, hasher, tokens).login(tenant, data.email, data.password)
    await db.commit()
    return token_response(issued)


@router.post("/refresh", response_model=TokenResponse, summary="Refresh tokens")
async def refresh(
    request: Request,
    data: RefreshRequest,
    resolver: Resolver,
    db: DbSession,
    store: Store,
    hasher: Hasher,
    tokens: Tokens,
) -> TokenResponse:
    tenant = await resolver.resolve(request, fallback_key=data.tenant_slug)
    issued = await AuthService(store, hasher, tokens).refresh(tenant, data.refresh_token)
    await db.commit()
    return token_response(issued)


@router.post("/logout", response_model=MessageResponse, summary="Log out")
async def logout(access: CurrentIdentity) -> MessageResponse:
    """
    Acknowledge logout.

    Tokens are stateless and stay valid until they expire; clients discard them.
    """
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=MeResponse, summary="Current identity")
async def me(access: CurrentIdentity) -> MeResponse:
    """
    Identity behind the bearer token.

    Without a tenant signal the token's own tenant is used; a tenant the
    request does name must match the token.
    """
    return MeResponse(
        id=access.user.id,
        email=access.user.email,
        full_name=access.user.full_name,
        role=access.user.role,
        tenant_id=access.tenant_id,
        tenant=TenantResponse.model_validate(access.tenant),
    )
