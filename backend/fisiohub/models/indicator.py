"""Indicator model - Daily clinical indicators collected per sector/shift."""

from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import Date, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from fisiohub.models.base import BaseModel

# Non-negative counters
COUNT_FIELDS = (
    "patients_hospitalized",
    "patients_prescribed",
    "patients_captured",
    "discharges",
    "intubations",
    "respiratory_therapy_count",
    "deaths",
    "cardiac_arrests",
    "artificial_airway_patients",
    "sedestation_expected",
    "orthostatism_expected",
    "pronations",
    "oxygen_therapy_patients",
    "multidisciplinary_visits",
    "tracheostomies",
    "non_ambulating_patients",
    "falls_and_incidents",
)

# Percentages in [0, 100]
RATE_FIELDS = (
    "extubation_effectiveness_rate",
    "respiratory_therapy_rate",
    "motor_therapy_rate",
    "aspiration_rate",
    "sedestation_rate",
    "orthostatism_rate",
    "ambulation_rate",
    "non_invasive_ventilation_rate",
    "invasive_mechanical_ventilation_rate",
)


class Indicator(BaseModel):
    """
    Indicator model.

    One row is a snapshot of a sector's indicators for a date and shift.
    Optionally linked to a patient and to a clinical service.
    """

    __tablename__ = "indicators"

    recorded_by: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        comment="User who recorded the snapshot",
    )

    patient_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("patients.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    service_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("clinical_services.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    reference_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    collaborator: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    sector: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    shift: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Hospitalization
    patients_hospitalized: Mapped[Optional[int]] = mapped_column(nullable=True)
    patients_prescribed: Mapped[Optional[int]] = mapped_column(nullable=True)
    patients_captured: Mapped[Optional[int]] = mapped_column(nullable=True)
    discharges: Mapped[Optional[int]] = mapped_column(nullable=True)
    intubations: Mapped[Optional[int]] = mapped_column(nullable=True)

    # Respiratory
    respiratory_therapy_count: Mapped[Optional[int]] = mapped_column(nullable=True)
    extubation_effectiveness_rate: Mapped[Optional[float]] = mapped_column(nullable=True)
    deaths: Mapped[Optional[int]] = mapped_column(nullable=True)
    cardiac_arrests: Mapped[Optional[int]] = mapped_column(nullable=True)
    respiratory_therapy_rate: Mapped[Optional[float]] = mapped_column(nullable=True)

    # Motor
    motor_therapy_rate: Mapped[Optional[float]] = mapped_column(nullable=True)
    artificial_airway_patients: Mapped[Optional[int]] = mapped_column(nullable=True)
    aspiration_rate: Mapped[Optional[float]] = mapped_column(nullable=True)

    # Mobilization
    sedestation_expected: Mapped[Optional[int]] = mapped_column(nullable=True)
    sedestation_rate: Mapped[Optional[float]] = mapped_column(nullable=True)
    orthostatism_expected: Mapped[Optional[int]] = mapped_column(nullable=True)
    orthostatism_rate: Mapped[Optional[float]] = mapped_column(nullable=True)
    ambulation_rate: Mapped[Optional[float]] = mapped_column(nullable=True)

    # Other
    pronations: Mapped[Optional[int]] = mapped_column(nullable=True)
    oxygen_therapy_patients: Mapped[Optional[int]] = mapped_column(nullable=True)
    multidisciplinary_visits: Mapped[Optional[int]] = mapped_column(nullable=True)
    non_invasive_ventilation_rate: Mapped[Optional[float]] = mapped_column(nullable=True)
    invasive_mechanical_ventilation_rate: Mapped[Optional[float]] = mapped_column(nullable=True)
    tracheostomies: Mapped[Optional[int]] = mapped_column(nullable=True)
    non_ambulating_patients: Mapped[Optional[int]] = mapped_column(nullable=True)
    falls_and_incidents: Mapped[Optional[int]] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        """String representation."""
        return f"<Indicator id={self.id} date={self.reference_date}>"
