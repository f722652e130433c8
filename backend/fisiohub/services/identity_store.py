"""Persistence collaborator for tenants and users."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fisiohub.core.errors import ConflictError
from fisiohub.models.tenant import Tenant, TenantPlan, TenantStatus
from fisiohub.models.user import User, UserRole

logger = logging.getLogger(__name__)


class IdentityStore:
    """
    Tenant and user lookups used by the resolver, the gate and registration.

    The store never commits; callers own the transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_tenant_by_slug_or_subdomain(self, key: str) -> Optional[Tenant]:
        """
        Find the single tenant whose slug or subdomain equals ``key``.

        Returns None when nothing matches and when the key is ambiguous
        (one tenant's slug equals another tenant's subdomain).
        """
        result = await self.session.execute(
            select(Tenant).where(or_(Tenant.slug == key, Tenant.subdomain == key)).limit(2)
        )
        tenants = result.scalars().all()
        if len(tenants) > 1:
            logger.warning("Ambiguous tenant key", extra={"tenant_key": key})
            return None
        return tenants[0] if tenants else None

    async def find_tenant_by_custom_domain(self, domain: str) -> Optional[Tenant]:
        result = await self.session.execute(select(Tenant).where(Tenant.custom_domain == domain))
        return result.scalar_one_or_none()

    async def get_tenant(self, tenant_id: UUID) -> Optional[Tenant]:
        return await self.session.get(Tenant, tenant_id)

    async def find_user_by_email_and_tenant(self, email: str, tenant_id: UUID) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(User.tenant_id == tenant_id, User.email == email.lower())
        )
        return result.scalar_one_or_none()

    async def get_user(self, user_id: UUID) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def create_tenant(
        self,
        *,
        name: str,
        slug: str,
        subdomain: Optional[str] = None,
        custom_domain: Optional[str] = None,
        plan: TenantPlan = TenantPlan.BASIC,
        contact_email: Optional[str] = None,
        trial_days: int = 14,
    ) -> Tenant:
        """
        Check that slug/subdomain/domain are free, then insert the tenant.

        Both steps run in the caller's transaction; a concurrent insert that
        slips past the check is caught by the unique constraints and reported
        the same way.

        Raises:
            ConflictError: If the slug, subdomain or custom domain is taken
        """
        keys = [slug] + ([subdomain] if subdomain else [])
        conditions = [Tenant.slug.in_(keys), Tenant.subdomain.in_(keys)]
        if custom_domain:
            conditions.append(Tenant.custom_domain == custom_domain)

        existing = await self.session.execute(select(Tenant.id).where(or_(*conditions)).limit(1))
        if existing.first() is not None:
            raise ConflictError("Slug, subdomain or domain already in use")

        tenant = Tenant(
            name=name,
            slug=slug,
            subdomain=subdomain,
            custom_domain=custom_domain,
            plan=plan,
            status=TenantStatus.TRIAL,
            contact_email=contact_email,
            trial_ends_at=datetime.now(timezone.utc) + timedelta(days=trial_days),
        )
        self.session.add(tenant)
        await self._flush_or_conflict("Slug, subdomain or domain already in use")
        return tenant

    async def create_user(
        self,
        *,
        tenant_id: UUID,
        email: str,
        password_hash: str,
        full_name: str,
        role: UserRole,
        phone: Optional[str] = None,
        specialty: Optional[str] = None,
        professional_registry: Optional[str] = None,
        created_by: Optional[UUID] = None,
    ) -> User:
        """
        Insert a user in a tenant.

        Raises:
            ConflictError: If the email is already registered in the tenant
        """
        email = email.lower()
        if await self.find_user_by_email_and_tenant(email, tenant_id) is not None:
            raise ConflictError("Email already registered in this tenant")

        user = User(
            tenant_id=tenant_id,
            email=email,
            password_hash=password_hash,
            full_name=full_name,
            role=role,
            phone=phone,
            specialty=specialty,
            professional_registry=professional_registry,
            created_by=created_by,
        )
        self.session.add(user)
        await self._flush_or_conflict("Email already registered in this tenant")
        return user

    async def _flush_or_conflict(self, message: str) -> None:
        try:
            await self.session.flush()
        except IntegrityError:
            raise ConflictError(message) from None
