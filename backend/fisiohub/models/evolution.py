"""Evolution model - Clinical progress notes tied to an appointment."""

from typing import Optional
from uuid import UUID

from sqlalchemy import ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fisiohub.models.base import BaseModel
from fisiohub.models.patient import Patient


class Evolution(BaseModel):
    """
    Evolution (clinical progress note) model.

    One evolution per appointment. patient_id is copied from the appointment
    at creation time.
    """

    __tablename__ = "evolutions"

    appointment_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("appointments.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        comment="Appointment this evolution documents",
    )

    patient_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Patient (denormalized from the appointment)",
    )

    author_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        comment="Professional who wrote the evolution",
    )

    symptoms: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    treatment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    observations: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    exercises: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    next_steps: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    patient: Mapped[Patient] = relationship(lazy="raise")

    def __repr__(self) -> str:
        """String representation."""
        return f"<Evolution id={self.id} appointment={self.appointment_id}>"
