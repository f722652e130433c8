"""Base model with tenant isolation and audit fields."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models with common fields."""

    pass


class TenantMixin:
    """Mixin for tenant isolation - required on all multi-tenant tables."""

    tenant_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("tenants.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="Owning tenant; every query filters on it",
    )


class TimestampMixin:
    """Mixin for timestamp fields - created_at and updated_at only."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        comment="Timestamp when record was created",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
        comment="Timestamp when record was last updated",
    )


class AuditMixin(TimestampMixin):
    """Mixin for audit fields - who created/updated and when."""

    created_by: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        nullable=True,
        comment="User ID who created this record",
    )

    updated_by: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        nullable=True,
        comment="User ID who last updated this record",
    )


class BaseModel(Base, TenantMixin, AuditMixin):
    """
    Base model for all multi-tenant tables.

    Includes:
    - id (primary key)
    - tenant_id (mandatory tenant predicate)
    - created_at, updated_at, created_by, updated_by (audit trail)
    """

    __abstract__ = True

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
        comment="Primary key (UUID)",
    )
