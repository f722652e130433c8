"""Tenant lifecycle: registration, profile updates, suspension."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from fisiohub.core.errors import ConflictError, ValidationFailedError
from fisiohub.core.security import PasswordHasher
from fisiohub.models.tenant import Tenant, TenantStatus
from fisiohub.models.user import User, UserRole
from fisiohub.schemas.common import patch_values
from fisiohub.schemas.tenant import TenantRegisterRequest, TenantUpdate
from fisiohub.services.identity_store import IdentityStore

logger = logging.getLogger(__name__)


class TenantService:
    """
    Tenant operations.

    Methods flush but never commit; the endpoint commits once so that
    registration (tenant + admin) is a single transaction.
    """

    def __init__(
        self,
        session: AsyncSession,
        store: IdentityStore,
        hasher: PasswordHasher,
        trial_days: int = 14,
    ) -> None:
        self.session = session
        self.store = store
        self.hasher = hasher
        self.trial_days = trial_days

    async def register(self, data: TenantRegisterRequest) -> tuple[Tenant, User]:
        """
        Create a tenant in trial status together with its first admin.

        Raises:
            ConflictError: Slug, subdomain or custom domain already taken
        """
        tenant = await self.store.create_tenant(
            name=data.name,
            slug=data.slug,
            subdomain=data.subdomain,
            custom_domain=data.custom_domain,
            plan=data.plan,
            contact_email=data.contact_email or data.admin_email,
            trial_days=self.trial_days,
        )
        admin = await self.store.create_user(
            tenant_id=tenant.id,
            email=data.admin_email,
            password_hash=self.hasher.hash(data.admin_password),
            full_name=data.admin_name,
            role=UserRole.ADMIN,
        )
        tenant.created_by = admin.id

        logger.info(
            "Tenant registered",
            extra={"tenant_id": str(tenant.id), "slug": tenant.slug, "plan": tenant.plan.value},
        )
        return tenant, admin

    async def update(self, tenant: Tenant, data: TenantUpdate, actor_id: UUID) -> Tenant:
        changes = patch_values(data, required=("name", "plan"))
        for field, value in changes.items():
            setattr(tenant, field, value)
        tenant.updated_by = actor_id
        await self.session.flush()

        logger.info("Tenant updated", extra={"tenant_id": str(tenant.id), "fields": sorted(changes)})
        return tenant

    async def suspend(self, tenant: Tenant, reason: str, actor_id: Optional[UUID] = None) -> Tenant:
        """
        Suspend a tenant. Suspended tenants stop resolving for every request
        except the public status inquiry.
        """
        if tenant.is_suspended:
            raise ConflictError("Tenant is already suspended")

        tenant.status = TenantStatus.SUSPENDED
        tenant.suspension_reason = reason
        tenant.updated_by = actor_id
        await self.session.flush()

        logger.warning(
            "Tenant suspended",
            extra={"tenant_id": str(tenant.id), "slug": tenant.slug, "actor_id": str(actor_id)},
        )
        return tenant

    async def reactivate(self, tenant: Tenant, actor_id: Optional[UUID] = None) -> Tenant:
        if not tenant.is_suspended:
            raise ValidationFailedError("Tenant is not suspended")

        tenant.status = TenantStatus.ACTIVE
        tenant.suspension_reason = None
        tenant.updated_by = actor_id
        await self.session.flush()

        logger.info("Tenant reactivated", extra={"tenant_id": str(tenant.id), "slug": tenant.slug})
        return tenant
