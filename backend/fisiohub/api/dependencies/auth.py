"""Authentication dependencies for API endpoints."""

from typing import Annotated, Any, Callable, Coroutine, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from fisiohub.api.dependencies.database import AppSettings, DbSession, Tokens
from fisiohub.core.database import set_tenant_context
from fisiohub.services.auth_gate import AccessContext, AuthGate
from fisiohub.services.identity_store import IdentityStore
from fisiohub.services.tenant_resolver import TenantResolver

# Documents the scheme in OpenAPI; the gate does the actual parsing
security = HTTPBearer(auto_error=False)


def get_identity_store(db: DbSession) -> IdentityStore:
    return IdentityStore(db)


def get_tenant_resolver(
    store: Annotated[IdentityStore, Depends(get_identity_store)],
    settings: AppSettings,
) -> TenantResolver:
    return TenantResolver(
        store,
        header_name=settings.TENANT_HEADER,
        reserved_subdomains=settings.TENANT_RESERVED_SUBDOMAINS,
    )


def require_access(
    capability: Optional[str] = None,
    *,
    allow_suspended: bool = False,
    tenant_from_token: bool = False,
) -> Callable[..., Coroutine[Any, Any, AccessContext]]:
    """
    Build a dependency that runs the auth gate for a route.

    Usage:
        @router.get("/patients")
        async def list_patients(
            access: Annotated[AccessContext, Depends(require_access("patients:read"))],
        ): ...

    Args:
        capability: Capability name from ``core.capabilities``; None for
            routes any member of the tenant may call
        allow_suspended: Admit suspended tenants (reactivation only)
        tenant_from_token: Fall back to the token's tenant when the request
            names none (identity routes)
    """

    async def authorize(
        request: Request,
        db: DbSession,
        tokens: Tokens,
        store: Annotated[IdentityStore, Depends(get_identity_store)],
        resolver: Annotated[TenantResolver, Depends(get_tenant_resolver)],
        _credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    ) -> AccessContext:
        gate = AuthGate(resolver, tokens, store)
        access = await gate.authorize(
            request, capability, allow_suspended=allow_suspended, tenant_from_token=tenant_from_token
        )
        await set_tenant_context(db, access.tenant_id)
        return access

    return authorize


CurrentIdentity = Annotated[AccessContext, Depends(require_access(tenant_from_token=True))]
Resolver = Annotated[TenantResolver, Depends(get_tenant_resolver)]
