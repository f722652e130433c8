"""User model - System users with authentication."""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, String, UniqueConstraint
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from fisiohub.models.base import BaseModel


class UserRole(str, Enum):
    """User roles for RBAC."""

    ADMIN = "admin"  # Full tenant admin rights
    THERAPIST = "therapist"  # Physiotherapist, owns evolutions and scales
    DOCTOR = "doctor"
    NURSE = "nurse"
    RECEPTIONIST = "receptionist"  # Scheduling only


class User(BaseModel):
    """
    User model.

    Users belong to a tenant and have roles for RBAC.
    Authentication via email/password (hashed with bcrypt).
    Users are deactivated, never deleted.
    """

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("tenant_id", "email", name="uq_users_tenant_email"),
    )

    # Authentication
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Email address (used for login, unique per tenant)",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Bcrypt password hash",
    )

    is_active: Mapped[bool] = mapped_column(
        default=True,
        nullable=False,
        comment="Whether user account is active",
    )

    # Profile
    full_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Full name of user",
    )

    role: Mapped[UserRole] = mapped_column(
        SQLEnum(
            UserRole,
            name="user_role",
            native_enum=False,
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        default=UserRole.THERAPIST,
        comment="User role for RBAC",
    )

    phone: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="Contact phone number",
    )

    specialty: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        comment="Clinical specialty",
    )

    professional_registry: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        comment="Professional council registry number (e.g. CREFITO)",
    )

    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Last successful login",
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<User {self.id} ({self.role.value})>"
