"""Pydantic schemas for functional scales (Barthel, MRC) and improvements."""

from typing import Annotated, Optional
from uuid import UUID

from pydantic import Field

from fisiohub.models.scale import AssessmentType
from fisiohub.schemas.common import RequestModel, ResponseModel, UTCDateTime

MrcGrade = Annotated[int, Field(ge=0, le=5)]


class ScaleCreateBase(RequestModel):
    patient_id: UUID = Field(..., description="Evaluated patient")
    evolution_id: Optional[UUID] = Field(None, description="Evolution the evaluation belongs to")
    assessment_type: AssessmentType = AssessmentType.ADMISSION
    evaluated_at: Optional[UTCDateTime] = Field(None, description="Defaults to now")


class BarthelScaleCreate(ScaleCreateBase):
    """Barthel item scores; total and classification are computed server side."""

    feeding: int = Field(..., ge=0, le=10)
    bathing: int = Field(..., ge=0, le=5)
    grooming: int = Field(..., ge=0, le=5)
    dressing: int = Field(..., ge=0, le=10)
    bowel_control: int = Field(..., ge=0, le=10)
    bladder_control: int = Field(..., ge=0, le=10)
    toileting: int = Field(..., ge=0, le=10)
    transfer: int = Field(..., ge=0, le=15)
    mobility: int = Field(..., ge=0, le=15)
    stairs: int = Field(..., ge=0, le=10)


class MrcScaleCreate(ScaleCreateBase):
    """MRC grades (0-5) per muscle group."""

    shoulder_abduction: MrcGrade
    elbow_flexion: MrcGrade
    wrist_extension: MrcGrade
    hip_flexion: MrcGrade
    knee_extension: MrcGrade
    ankle_flexion: MrcGrade
    neck_flexion: MrcGrade
    trunk_flexion: MrcGrade
    shoulder_adduction: MrcGrade
    elbow_extension: MrcGrade


class ScaleResponseBase(ResponseModel):
    id: UUID
    patient_id: UUID
    evolution_id: Optional[UUID] = None
    evaluator_id: UUID
    assessment_type: AssessmentType
    evaluated_at: UTCDateTime
    total_score: int
    classification: str
    created_at: UTCDateTime


class BarthelScaleResponse(ScaleResponseBase):
    feeding: int
    bathing: int
    grooming: int
    dressing: int
    bowel_control: int
    bladder_control: int
    toileting: int
    transfer: int
    mobility: int
    stairs: int


class MrcScaleResponse(ScaleResponseBase):
    shoulder_abduction: int
    elbow_flexion: int
    wrist_extension: int
    hip_flexion: int
    knee_extension: int
    ankle_flexion: int
    neck_flexion: int
    trunk_flexion: int
    shoulder_adduction: int
    elbow_extension: int
    average_score: float


class ScaleComparison(ResponseModel):
    """One discharge compared with the admission that preceded it."""

    admission_id: UUID
    discharge_id: UUID
    admission_score: float
    discharge_score: float
    difference: float
    admission_classification: str
    discharge_classification: str
    admission_at: UTCDateTime
    discharge_at: UTCDateTime
    improved: bool


class PatientImprovements(ResponseModel):
    patient_id: UUID
    barthel: list[ScaleComparison]
    mrc: list[ScaleComparison]


class ImprovementSummary(ResponseModel):
    """Aggregate over every comparison of one scale."""

    comparisons: int
    improved: int
    improvement_rate: float = Field(..., description="Percentage of improved comparisons")
    average_difference: float


class ImprovementDashboard(ResponseModel):
    barthel: ImprovementSummary
    mrc: ImprovementSummary
    patients_evaluated: int
