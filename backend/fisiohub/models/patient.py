"""Patient model - Patient demographics."""

from datetime import date
from typing import Optional

from sqlalchemy import Date, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from fisiohub.models.base import BaseModel


class Patient(BaseModel):
    """
    Patient model.

    Stores patient demographics with PII.
    Access always filtered by tenant_id.
    """

    __tablename__ = "patients"
    __table_args__ = (
        UniqueConstraint("tenant_id", "document", name="uq_patients_tenant_document"),
    )

    # Identity
    full_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Patient full name (PII)",
    )

    document: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        comment="National document number, CPF (PII)",
    )

    birth_date: Mapped[Optional[date]] = mapped_column(
        Date,
        nullable=True,
        comment="Patient date of birth (PII)",
    )

    # Contact information (PII)
    phone: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="Primary contact phone (PII)",
    )

    email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Contact email (PII)",
    )

    address: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Full address (PII)",
    )

    # Hospital admission
    attendance_number: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="Hospital attendance number",
    )

    bed_number: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        comment="Bed identifier",
    )

    # Clinical metadata
    diagnosis: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Working diagnosis (free text)",
    )

    observations: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Administrative notes (allergies, special needs, etc.)",
    )

    is_active: Mapped[bool] = mapped_column(
        default=True,
        nullable=False,
        comment="Whether patient record is active",
    )

    def __repr__(self) -> str:
        """String representation (avoid PII in logs)."""
        return f"<Patient id={self.id}>"

    @property
    def age(self) -> Optional[int]:
        """Calculate current age."""
        if self.birth_date is None:
            return None

        today = date.today()
        return (
            today.year
            - self.birth_date.year
            - ((today.month, today.day) < (self.birth_date.month, self.birth_date.day))
        )
