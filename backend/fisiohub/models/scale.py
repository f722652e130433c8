"""Functional scale models - Barthel index and MRC muscle strength."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Numeric, String, Uuid
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, declared_attr, mapped_column, relationship

from fisiohub.models.base import BaseModel, utcnow
from fisiohub.models.patient import Patient


class AssessmentType(str, Enum):
    """When in the stay the scale was applied."""

    ADMISSION = "admission"
    DISCHARGE = "discharge"


class ScaleMixin:
    """Columns shared by every functional scale."""

    @declared_attr
    def patient_id(cls) -> Mapped[UUID]:
        return mapped_column(
            Uuid,
            ForeignKey("patients.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
            comment="Evaluated patient",
        )

    @declared_attr
    def evolution_id(cls) -> Mapped[Optional[UUID]]:
        return mapped_column(
            Uuid,
            ForeignKey("evolutions.id", ondelete="SET NULL"),
            nullable=True,
            comment="Evolution the evaluation was recorded with",
        )

    @declared_attr
    def evaluator_id(cls) -> Mapped[UUID]:
        return mapped_column(
            Uuid,
            ForeignKey("users.id", ondelete="RESTRICT"),
            nullable=False,
            comment="Professional who applied the scale",
        )

    @declared_attr
    def assessment_type(cls) -> Mapped[AssessmentType]:
        return mapped_column(
            SQLEnum(
                AssessmentType,
                name="assessment_type",
                native_enum=False,
                create_constraint=True,
                values_callable=lambda x: [e.value for e in x],
            ),
            nullable=False,
            default=AssessmentType.ADMISSION,
        )

    @declared_attr
    def evaluated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            nullable=False,
            default=utcnow,
            index=True,
        )

    @declared_attr
    def classification(cls) -> Mapped[str]:
        return mapped_column(String(50), nullable=False)

    @declared_attr
    def patient(cls) -> Mapped[Patient]:
        return relationship(Patient, lazy="raise")


class BarthelScale(BaseModel, ScaleMixin):
    """Barthel index of activities of daily living (0-100)."""

    __tablename__ = "barthel_scales"

    feeding: Mapped[int] = mapped_column(nullable=False)
    bathing: Mapped[int] = mapped_column(nullable=False)
    grooming: Mapped[int] = mapped_column(nullable=False)
    dressing: Mapped[int] = mapped_column(nullable=False)
    bowel_control: Mapped[int] = mapped_column(nullable=False)
    bladder_control: Mapped[int] = mapped_column(nullable=False)
    toileting: Mapped[int] = mapped_column(nullable=False)
    transfer: Mapped[int] = mapped_column(nullable=False)
    mobility: Mapped[int] = mapped_column(nullable=False)
    stairs: Mapped[int] = mapped_column(nullable=False)

    total_score: Mapped[int] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        """String representation."""
        return f"<BarthelScale id={self.id} total={self.total_score}>"


class MrcScale(BaseModel, ScaleMixin):
    """Medical Research Council muscle strength sum score (0-50)."""

    __tablename__ = "mrc_scales"

    shoulder_abduction: Mapped[int] = mapped_column(nullable=False)
    elbow_flexion: Mapped[int] = mapped_column(nullable=False)
    wrist_extension: Mapped[int] = mapped_column(nullable=False)
    hip_flexion: Mapped[int] = mapped_column(nullable=False)
    knee_extension: Mapped[int] = mapped_column(nullable=False)
    ankle_flexion: Mapped[int] = mapped_column(nullable=False)
    neck_flexion: Mapped[int] = mapped_column(nullable=False)
    trunk_flexion: Mapped[int] = mapped_column(nullable=False)
    shoulder_adduction: Mapped[int] = mapped_column(nullable=False)
    elbow_extension: Mapped[int] = mapped_column(nullable=False)

    total_score: Mapped[int] = mapped_column(nullable=False)
    average_score: Mapped[float] = mapped_column(Numeric(3, 1, asdecimal=False), nullable=False)

    def __repr__(self) -> str:
        """String representation."""
        return f"<MrcScale id={self.id} average={self.average_score}>"
