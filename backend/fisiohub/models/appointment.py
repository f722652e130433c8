"""Appointment model - Scheduled therapy sessions."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Numeric, Text, Uuid
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fisiohub.models.base import BaseModel
from fisiohub.models.patient import Patient


class AppointmentStatus(str, Enum):
    """Appointment workflow status."""

    SCHEDULED = "scheduled"  # Future appointment
    CONFIRMED = "confirmed"  # Patient confirmed attendance
    COMPLETED = "completed"  # Session happened
    CANCELLED = "cancelled"  # Cancelled appointment
    NO_SHOW = "no_show"  # Patient didn't attend


# Statuses that still occupy the therapist's agenda
OPEN_STATUSES = (AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED)


class Appointment(BaseModel):
    """
    Appointment model.

    Represents a scheduled session between a patient and a therapist.
    An appointment has at most one evolution.
    """

    __tablename__ = "appointments"

    patient_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Patient this appointment is for",
    )

    therapist_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="Professional conducting the session",
    )

    scheduled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        comment="Scheduled start time (UTC)",
    )

    duration_minutes: Mapped[int] = mapped_column(
        default=60,
        nullable=False,
        comment="Planned duration",
    )

    status: Mapped[AppointmentStatus] = mapped_column(
        SQLEnum(
            AppointmentStatus,
            name="appointment_status",
            native_enum=False,
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        default=AppointmentStatus.SCHEDULED,
        comment="Current status of appointment",
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Free text notes",
    )

    price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(10, 2),
        nullable=True,
        comment="Session price",
    )

    patient: Mapped[Patient] = relationship(lazy="raise")

    def __repr__(self) -> str:
        """String representation."""
        return f"<Appointment id={self.id} patient={self.patient_id} status={self.status.value}>"
