"""Functional scale scoring and admission/discharge improvement analysis."""

import logging
from collections import defaultdict
from typing import Iterable, Optional, Sequence, Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from fisiohub.core.errors import ResourceNotFoundError
from fisiohub.models.base import utcnow
from fisiohub.models.evolution import Evolution
from fisiohub.models.patient import Patient
from fisiohub.models.scale import AssessmentType, BarthelScale, MrcScale
from fisiohub.schemas.common import to_utc
from fisiohub.schemas.scale import (
    BarthelScaleCreate,
    ImprovementDashboard,
    ImprovementSummary,
    MrcScaleCreate,
    PatientImprovements,
    ScaleComparison,
)
from fisiohub.services.repository import TenantScopedRepository

logger = logging.getLogger(__name__)

BARTHEL_ITEMS = (
    "feeding",
    "bathing",
    "grooming",
    "dressing",
    "bowel_control",
    "bladder_control",
    "toileting",
    "transfer",
    "mobility",
    "stairs",
)

MRC_MUSCLES = (
    "shoulder_abduction",
    "elbow_flexion",
    "wrist_extension",
    "hip_flexion",
    "knee_extension",
    "ankle_flexion",
    "neck_flexion",
    "trunk_flexion",
    "shoulder_adduction",
    "elbow_extension",
)

# (lower bound, label), highest first
BARTHEL_CLASSES = (
    (90, "independent"),
    (60, "mild_dependency"),
    (40, "moderate_dependency"),
    (20, "severe_dependency"),
)
MRC_CLASSES = (
    (4.5, "normal"),
    (4.0, "good"),
    (3.0, "moderate"),
    (2.0, "weak"),
    (1.0, "very_weak"),
)

Scale = Union[BarthelScale, MrcScale]


def classify_barthel(total: int) -> str:
    for lower, label in BARTHEL_CLASSES:
        if total >= lower:
            return label
    return "total_dependency"


def classify_mrc(average: float) -> str:
    for lower, label in MRC_CLASSES:
        if average >= lower:
            return label
    return "absent"


def barthel_total(items: dict[str, int]) -> int:
    return sum(items[name] for name in BARTHEL_ITEMS)


def mrc_scores(grades: dict[str, int]) -> tuple[int, float]:
    """Sum of grades and the per-muscle average rounded to one decimal."""
    total = sum(grades[name] for name in MRC_MUSCLES)
    return total, round(total / len(MRC_MUSCLES), 1)


def scale_score(scale: Scale) -> float:
    """Score used for comparisons: Barthel total, MRC average."""
    if isinstance(scale, MrcScale):
        return float(scale.average_score)
    return float(scale.total_score)


def compare_assessments(scales: Iterable[Scale]) -> list[ScaleComparison]:
    """
    Pair each discharge with the latest admission evaluated at or before it.

    Scales must belong to one patient and one scale type. Discharges with no
    earlier admission are skipped.
    """
    # Admissions sort before discharges evaluated at the same instant
    ordered = sorted(
        scales,
        key=lambda s: (to_utc(s.evaluated_at), s.assessment_type != AssessmentType.ADMISSION),
    )
    comparisons = []
    admission: Optional[Scale] = None

    for scale in ordered:
        if scale.assessment_type == AssessmentType.ADMISSION:
            admission = scale
            continue
        if admission is None:
            continue

        before, after = scale_score(admission), scale_score(scale)
        comparisons.append(
            ScaleComparison(
                admission_id=admission.id,
                discharge_id=scale.id,
                admission_score=before,
                discharge_score=after,
                difference=round(after - before, 1),
                admission_classification=admission.classification,
                discharge_classification=scale.classification,
                admission_at=admission.evaluated_at,
                discharge_at=scale.evaluated_at,
                improved=after > before,
            )
        )
    return comparisons


def summarize(comparisons: Sequence[ScaleComparison]) -> ImprovementSummary:
    if not comparisons:
        return ImprovementSummary(comparisons=0, improved=0, improvement_rate=0.0, average_difference=0.0)

    improved = sum(1 for c in comparisons if c.improved)
    return ImprovementSummary(
        comparisons=len(comparisons),
        improved=improved,
        improvement_rate=round(improved * 100 / len(comparisons), 1),
        average_difference=round(sum(c.difference for c in comparisons) / len(comparisons), 2),
    )


class ScaleService:
    """Creates and analyses Barthel and MRC evaluations within one tenant."""

    def __init__(self, session: AsyncSession, tenant_id: UUID) -> None:
        self.session = session
        self.tenant_id = tenant_id
        self.patients = TenantScopedRepository(session, Patient, tenant_id)
        self.evolutions = TenantScopedRepository(session, Evolution, tenant_id)
        self.barthel = TenantScopedRepository(session, BarthelScale, tenant_id, label="Barthel scale")
        self.mrc = TenantScopedRepository(session, MrcScale, tenant_id, label="MRC scale")

    async def _check_references(self, patient_id: UUID, evolution_id: Optional[UUID]) -> None:
        await self.patients.get_or_404(patient_id)
        if evolution_id is not None:
            evolution = await self.evolutions.get_or_404(evolution_id)
            if evolution.patient_id != patient_id:
                raise ResourceNotFoundError("Evolution not found for this patient")

    async def create_barthel(self, data: BarthelScaleCreate, evaluator_id: UUID) -> BarthelScale:
        """Store a Barthel evaluation with server-computed total and classification."""
        await self._check_references(data.patient_id, data.evolution_id)

        values = data.model_dump(exclude={"evaluated_at"})
        total = barthel_total(values)
        scale = BarthelScale(
            **values,
            evaluator_id=evaluator_id,
            evaluated_at=data.evaluated_at or utcnow(),
            total_score=total,
            classification=classify_barthel(total),
        )
        await self.barthel.add(scale)
        logger.info(
            "Barthel scale recorded",
            extra={"tenant_id": str(self.tenant_id), "scale_id": str(scale.id), "total_score": total},
        )
        return scale

    async def create_mrc(self, data: MrcScaleCreate, evaluator_id: UUID) -> MrcScale:
        """Store an MRC evaluation with server-computed total, average and classification."""
        await self._check_references(data.patient_id, data.evolution_id)

        values = data.model_dump(exclude={"evaluated_at"})
        total, average = mrc_scores(values)
        scale = MrcScale(
            **values,
            evaluator_id=evaluator_id,
            evaluated_at=data.evaluated_at or utcnow(),
            total_score=total,
            average_score=average,
            classification=classify_mrc(average),
        )
        await self.mrc.add(scale)
        logger.info(
            "MRC scale recorded",
            extra={"tenant_id": str(self.tenant_id), "scale_id": str(scale.id), "average_score": average},
        )
        return scale

    async def patient_improvements(self, patient_id: UUID) -> PatientImprovements:
        await self.patients.get_or_404(patient_id)
        barthel, _ = await self.barthel.list(BarthelScale.patient_id == patient_id)
        mrc, _ = await self.mrc.list(MrcScale.patient_id == patient_id)
        return PatientImprovements(
            patient_id=patient_id,
            barthel=compare_assessments(barthel),
            mrc=compare_assessments(mrc),
        )

    async def improvement_dashboard(self) -> ImprovementDashboard:
        """Admission vs discharge comparisons across every patient of the tenant."""
        barthel, _ = await self.barthel.list()
        mrc, _ = await self.mrc.list()

        barthel_comparisons = _compare_per_patient(barthel)
        mrc_comparisons = _compare_per_patient(mrc)
        patients = {s.patient_id for s in barthel} | {s.patient_id for s in mrc}

        return ImprovementDashboard(
            barthel=summarize(barthel_comparisons),
            mrc=summarize(mrc_comparisons),
            patients_evaluated=len(patients),
        )


def _compare_per_patient(scales: Iterable[Scale]) -> list[ScaleComparison]:
    by_patient: dict[UUID, list[Scale]] = defaultdict(list)
    for scale in scales:
        by_patient[scale.patient_id].append(scale)

    comparisons: list[ScaleComparison] = []
    for patient_scales in by_patient.values():
        comparisons.extend(compare_assessments(patient_scales))
    return comparisons
