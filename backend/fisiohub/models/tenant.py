"""Tenant model - Organizations using the system."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, String, Text, Uuid
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from fisiohub.models.base import AuditMixin, Base


class TenantStatus(str, Enum):
    """Tenant lifecycle status."""

    TRIAL = "trial"
    ACTIVE = "active"
    SUSPENDED = "suspended"


class TenantPlan(str, Enum):
    """Subscription plan tier."""

    BASIC = "basic"
    PROFESSIONAL = "professional"
    ENTERPRISE = "enterprise"


class Tenant(Base, AuditMixin):
    """
    Tenant (Organization) model.

    Each tenant is an isolated organization (clinic, hospital, etc).
    All other tables reference tenant_id.

    Note: Tenant table itself doesn't have tenant_id (it IS the tenant).
    Tenants are never deleted; suspension is a status transition.
    """

    __tablename__ = "tenants"

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Organization name",
    )

    slug: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        index=True,
        comment="URL-safe identifier (e.g., 'central-clinic')",
    )

    subdomain: Mapped[Optional[str]] = mapped_column(
        String(63),
        nullable=True,
        unique=True,
        index=True,
        comment="DNS label under the platform domain",
    )

    custom_domain: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        unique=True,
        comment="Fully qualified custom domain",
    )

    status: Mapped[TenantStatus] = mapped_column(
        SQLEnum(
            TenantStatus,
            name="tenant_status",
            native_enum=False,
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        default=TenantStatus.TRIAL,
        comment="Lifecycle status",
    )

    plan: Mapped[TenantPlan] = mapped_column(
        SQLEnum(
            TenantPlan,
            name="tenant_plan",
            native_enum=False,
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        default=TenantPlan.BASIC,
        comment="Subscription plan tier",
    )

    contact_email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Primary contact email",
    )

    trial_ends_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="End of the trial period",
    )

    suspension_reason: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Why the tenant was suspended",
    )

    last_activity_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Last time a request resolved to this tenant",
    )

    @property
    def is_suspended(self) -> bool:
        """Whether the tenant is suspended."""
        return self.status == TenantStatus.SUSPENDED

    def __repr__(self) -> str:
        """String representation."""
        return f"<Tenant {self.slug} ({self.name})>"
