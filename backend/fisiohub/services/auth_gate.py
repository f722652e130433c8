"""Per-request authentication and tenant authorization gate."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from uuid import UUID

from starlette.requests import HTTPConnection

from fisiohub.core.capabilities import allowed_roles
from fisiohub.core.errors import (
    FisioHubError,
    ForbiddenError,
    TenantMismatchError,
    UnauthenticatedError,
)
from fisiohub.core.security import TokenClaims, TokenService, TokenType
from fisiohub.models.tenant import Tenant
from fisiohub.models.user import User, UserRole
from fisiohub.services.identity_store import IdentityStore
from fisiohub.services.tenant_resolver import TenantResolver

logger = logging.getLogger(__name__)


class GateState(str, Enum):
    """Progress of a request through the gate."""

    UNRESOLVED = "unresolved"
    TENANT_RESOLVED = "tenant_resolved"
    AUTHENTICATED = "authenticated"
    AUTHORIZED = "authorized"
    REJECTED = "rejected"


@dataclass(frozen=True)
class AccessContext:
    """Identity and tenant scope handed to downstream handlers."""

    tenant: Tenant
    user: User
    claims: TokenClaims

    @property
    def tenant_id(self) -> UUID:
        return self.tenant.id

    @property
    def user_id(self) -> UUID:
        return self.user.id

    @property
    def role(self) -> UserRole:
        return self.user.role


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an ``Authorization: Bearer <token>`` header.

    Raises:
        UnauthenticatedError: If the header is missing or not a bearer token
    """
    if not authorization:
        raise UnauthenticatedError("Missing Authorization: Bearer <token>")

    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token or " " in token:
        raise UnauthenticatedError("Malformed Authorization header")
    return token


class AuthGate:
    """
    Decides whether a request may proceed.

    UNRESOLVED -> TENANT_RESOLVED -> AUTHENTICATED -> AUTHORIZED, or REJECTED
    at the first failing step. Failures are terminal for the request; the
    gate never retries.
    """

    def __init__(self, resolver: TenantResolver, tokens: TokenService, store: IdentityStore) -> None:
        self.resolver = resolver
        self.tokens = tokens
        self.store = store
        self.state = GateState.UNRESOLVED

    async def authorize(
        self,
        request: HTTPConnection,
        capability: Optional[str] = None,
        allow_suspended: bool = False,
        tenant_from_token: bool = False,
    ) -> AccessContext:
        """
        Run the full gate for a request.

        Args:
            request: Inbound request
            capability: Capability the route requires (see core.capabilities);
                None only checks identity and tenant membership
            allow_suspended: Let a suspended tenant through (reactivation only)
            tenant_from_token: When the request names no tenant, take the
                token's tenant claim; a tenant the request does name is
                still checked against the token

        Returns:
            AccessContext, also attached to ``request.state.access``

        Raises:
            TenantNotFoundError: Tenant could not be resolved
            UnauthenticatedError: Missing/invalid token or inactive subject
            TenantMismatchError: Identity belongs to another tenant
            ForbiddenError: Role lacks the capability
        """
        try:
            tenant: Optional[Tenant]
            if tenant_from_token:
                tenant = await self.resolver.resolve_if_signalled(request, allow_suspended)
            else:
                tenant = await self.resolver.resolve(request, allow_suspended=allow_suspended)
            if tenant is not None:
                self.state = GateState.TENANT_RESOLVED

            user, claims = await self._authenticate(request)
            if tenant is None:
                tenant = await self.resolver.resolve_id(claims.tid, allow_suspended)
            self.state = GateState.AUTHENTICATED

            self._check_membership(tenant, user, claims)
            if capability is not None and user.role not in allowed_roles(capability):
                raise ForbiddenError(f"Role '{user.role.value}' cannot perform '{capability}'")
            self.state = GateState.AUTHORIZED
        except FisioHubError as exc:
            logger.info(
                "Auth gate rejected request",
                extra={
                    "gate_state": self.state.value,
                    "error_code": exc.code,
                    "tenant_key": getattr(request.state, "tenant_key", None),
                    "path": request.url.path,
                    "capability": capability,
                },
            )
            self.state = GateState.REJECTED
            raise

        access = AccessContext(tenant=tenant, user=user, claims=claims)
        request.state.access = access
        return access

    async def _authenticate(self, request: HTTPConnection) -> tuple[User, TokenClaims]:
        token = extract_bearer_token(request.headers.get("authorization"))
        claims = self.tokens.verify(token, TokenType.ACCESS)

        user = await self.store.get_user(claims.sub)
        if user is None or not user.is_active:
            raise UnauthenticatedError("User not found or inactive")
        return user, claims

    @staticmethod
    def _check_membership(tenant: Tenant, user: User, claims: TokenClaims) -> None:
        if claims.tid != tenant.id or user.tenant_id != tenant.id:
            raise TenantMismatchError()
