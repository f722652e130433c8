"""Login and token refresh against a resolved tenant."""

import logging
from dataclasses import dataclass

from fisiohub.core.errors import TenantMismatchError, UnauthenticatedError
from fisiohub.core.security import PasswordHasher, TokenService, TokenType
from fisiohub.models.base import utcnow
from fisiohub.models.tenant import Tenant
from fisiohub.models.user import User
from fisiohub.services.identity_store import IdentityStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


@dataclass(frozen=True)
class IssuedTokens:
    access_token: str
    refresh_token: str
    expires_in: int
    user: User
    tenant: Tenant


class AuthService:
    """Credential checks and token issuing; the tenant is always already resolved."""

    def __init__(self, store: IdentityStore, hasher: PasswordHasher, tokens: TokenService) -> None:
        self.store = store
        self.hasher = hasher
        self.tokens = tokens

    def issue(self, user: User, tenant: Tenant) -> IssuedTokens:
        return IssuedTokens(
            access_token=self.tokens.issue(user, TokenType.ACCESS),
            refresh_token=self.tokens.issue(user, TokenType.REFRESH),
            expires_in=int(self.tokens.access_ttl.total_seconds()),
            user=user,
            tenant=tenant,
        )

    async def login(self, tenant: Tenant, email: str, password: str) -> IssuedTokens:
        """
        Authenticate a user of ``tenant``.

        Unknown email, wrong password and inactive user all fail the same way.

        Raises:
            UnauthenticatedError: If the credentials do not match an active user
        """
        user = await self.store.find_user_by_email_and_tenant(email, tenant.id)
        if user is None or not user.is_active or not self.hasher.verify(password, user.password_hash):
            logger.info(
                "Login failed",
                extra={"tenant_id": str(tenant.id), "user_found": user is not None},
            )
            raise UnauthenticatedError(INVALID_CREDENTIALS)

        user.last_login_at = utcnow()
        logger.info("Login succeeded", extra={"tenant_id": str(tenant.id), "user_id": str(user.id)})
        return self.issue(user, tenant)

    async def refresh(self, tenant: Tenant, refresh_token: str) -> IssuedTokens:
        """
        Exchange a refresh token for a new token pair.

        Raises:
            InvalidTokenError: If the token is not a valid refresh token
            TenantMismatchError: If it was issued for another tenant
            UnauthenticatedError: If the user is gone or inactive
        """
        claims = self.tokens.verify(refresh_token, TokenType.REFRESH)
        if claims.tid != tenant.id:
            raise TenantMismatchError()

        user = await self.store.get_user(claims.sub)
        if user is None or not user.is_active:
            raise UnauthenticatedError("User not found or inactive")
        if user.tenant_id != tenant.id:
            raise TenantMismatchError()

        return self.issue(user, tenant)
