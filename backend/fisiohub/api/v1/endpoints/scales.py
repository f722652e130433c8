"""Functional scales API endpoints (Barthel, MRC, improvements).

The same create/list handlers are served under ``/barthel-scales``,
``/mrc-scales`` and the combined ``/scales`` prefix.
"""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from fisiohub.api.dependencies import DbSession
from fisiohub.api.dependencies.auth import require_access
from fisiohub.models.scale import AssessmentType, BarthelScale, MrcScale
from fisiohub.schemas.common import Page, PageParams
from fisiohub.schemas.scale import (
    BarthelScaleCreate,
    BarthelScaleResponse,
    ImprovementDashboard,
    MrcScaleCreate,
    MrcScaleResponse,
    PatientImprovements,
)
from fisiohub.services.auth_gate import AccessContext
from fisiohub.services.scales import ScaleService

router = APIRouter(prefix="/scales")
barthel_router = APIRouter(prefix="/barthel-scales")
mrc_router = APIRouter(prefix="/mrc-scales")

ReadAccess = Annotated[AccessContext, Depends(require_access("scales:read"))]
WriteAccess = Annotated[AccessContext, Depends(require_access("scales:write"))]


async def create_barthel(data: BarthelScaleCreate, access: WriteAccess, db: DbSession) -> BarthelScaleResponse:
    """
    Record a Barthel evaluation. Total score and classification are
    computed from the items.

    Raises:
        404: Patient or evolution not found in this tenant
    """
    scale = await ScaleService(db, access.tenant_id).create_barthel(data, access.user_id)
    await db.commit()
    return BarthelScaleResponse.model_validate(scale)


async def list_barthel(
    access: ReadAccess,
    db: DbSession,
    params: Annotated[PageParams, Depends()],
    patient_id: Optional[UUID] = Query(None),
    assessment_type: Optional[AssessmentType] = Query(None),
) -> Page[BarthelScaleResponse]:
    criteria = []
    if patient_id is not None:
        criteria.append(BarthelScale.patient_id == patient_id)
    if assessment_type is not None:
        criteria.append(BarthelScale.assessment_type == assessment_type)

    items, total = await ScaleService(db, access.tenant_id).barthel.list(
        *criteria,
        order_by=(BarthelScale.evaluated_at.desc(),),
        offset=params.offset,
        limit=params.limit,
    )
    return params.build(items, total, BarthelScaleResponse)


async def create_mrc(data: MrcScaleCreate, access: WriteAccess, db: DbSession) -> MrcScaleResponse:
    """
    Record an MRC evaluation. Total, average (one decimal) and
    classification are computed from the grades.

    Raises:
        404: Patient or evolution not found in this tenant
    """
    scale = await ScaleService(db, access.tenant_id).create_mrc(data, access.user_id)
    await db.commit()
    return MrcScaleResponse.model_validate(scale)


async def list_mrc(
    access: ReadAccess,
    db: DbSession,
    params: Annotated[PageParams, Depends()],
    patient_id: Optional[UUID] = Query(None),
    assessment_type: Optional[AssessmentType] = Query(None),
) -> Page[MrcScaleResponse]:
    criteria = []
    if patient_id is not None:
        criteria.append(MrcScale.patient_id == patient_id)
    if assessment_type is not None:
        criteria.append(MrcScale.assessment_type == assessment_type)

    items, total = await ScaleService(db, access.tenant_id).mrc.list(
        *criteria,
        order_by=(MrcScale.evaluated_at.desc(),),
        offset=params.offset,
        limit=params.limit,
    )
    return params.build(items, total, MrcScaleResponse)


for target, prefix in ((barthel_router, ""), (router, "/barthel")):
    target.add_api_route(
        prefix,
        create_barthel,
        methods=["POST"],
        response_model=BarthelScaleResponse,
        status_code=status.HTTP_201_CREATED,
        summary="Record Barthel evaluation",
    )
    target.add_api_route(
        prefix,
        list_barthel,
        methods=["GET"],
        response_model=Page[BarthelScaleResponse],
        summary="List Barthel evaluations",
    )

for target, prefix in ((mrc_router, ""), (router, "/mrc")):
    target.add_api_route(
        prefix,
        create_mrc,
        methods=["POST"],
        response_model=MrcScaleResponse,
        status_code=status.HTTP_201_CREATED,
        summary="Record MRC evaluation",
    )
    target.add_api_route(
        prefix,
        list_mrc,
        methods=["GET"],
        response_model=Page[MrcScaleResponse],
        summary="List MRC evaluations",
    )


@router.get(
    "/improvements/patient/{patient_id}",
    response_model=PatientImprovements,
    summary="Admission vs discharge for a patient",
)
async def patient_improvements(patient_id: UUID, access: ReadAccess, db: DbSession) -> PatientImprovements:
    """
    Compare every discharge evaluation with the latest admission evaluated
    at or before it, separately for Barthel (total) and MRC (average).

    Raises:
        404: Patient not found in this tenant
    """
    return await ScaleService(db, access.tenant_id).patient_improvements(patient_id)


@router.get(
    "/improvements/dashboard",
    response_model=ImprovementDashboard,
    summary="Improvement rates across the tenant",
)
async def improvements_dashboard(access: ReadAccess, db: DbSession) -> ImprovementDashboard:
    return await ScaleService(db, access.tenant_id).improvement_dashboard()
