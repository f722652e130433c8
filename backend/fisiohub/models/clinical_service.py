"""Clinical service model - Care lines offered by a tenant."""

from typing import Optional

from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from fisiohub.models.base import BaseModel


class ClinicalService(BaseModel):
    """
    Clinical service (physiotherapy, psychology, social work, ...).

    Codes are unique within a tenant. Services referenced by indicators are
    deactivated instead of deleted.
    """

    __tablename__ = "clinical_services"
    __table_args__ = (
        UniqueConstraint("tenant_id", "code", name="uq_clinical_services_tenant_code"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    code: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="URL-safe code, unique per tenant",
    )

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    color: Mapped[str] = mapped_column(
        String(7),
        nullable=False,
        default="#6B7280",
        comment="Hex color used by the dashboard",
    )

    icon: Mapped[str] = mapped_column(String(50), nullable=False, default="activity")

    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)

    def __repr__(self) -> str:
        """String representation."""
        return f"<ClinicalService {self.code}>"
