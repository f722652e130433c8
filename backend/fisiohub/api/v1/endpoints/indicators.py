"""Clinical indicators API endpoints."""

import logging
from datetime import date
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import or_

from fisiohub.api.dependencies import DbSession
from fisiohub.api.dependencies.auth import require_access
from fisiohub.core.errors import ValidationFailedError
from fisiohub.models.clinical_service import ClinicalService
from fisiohub.models.indicator import Indicator
from fisiohub.models.patient import Patient
from fisiohub.schemas.common import Page, PageParams
from fisiohub.schemas.indicator import IndicatorCreate, IndicatorResponse
from fisiohub.services.auth_gate import AccessContext
from fisiohub.services.repository import TenantScopedRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/indicators")

ReadAccess = Annotated[AccessContext, Depends(require_access("indicators:read"))]
WriteAccess = Annotated[AccessContext, Depends(require_access("indicators:write"))]


@router.post(
    "",
    response_model=IndicatorResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record indicators",
)
async def create_indicator(data: IndicatorCreate, access: WriteAccess, db: DbSession) -> IndicatorResponse:
    """
    Record an indicator snapshot.

    Raises:
        404: Referenced patient or clinical service not found in this tenant
    """
    if data.patient_id is not None:
        await TenantScopedRepository(db, Patient, access.tenant_id, label="Patient").get_or_404(
            data.patient_id
        )
    if data.service_id is not None:
        service = await TenantScopedRepository(
            db, ClinicalService, access.tenant_id, label="Clinical service"
        ).get_or_404(data.service_id)
        if not service.is_active:
            raise ValidationFailedError(f"Clinical service '{service.code}' is inactive")

    indicator = Indicator(**data.model_dump(), recorded_by=access.user_id, created_by=access.user_id)
    await TenantScopedRepository(db, Indicator, access.tenant_id).add(indicator)
    await db.commit()

    logger.info(
        "Indicators recorded",
        extra={"tenant_id": str(access.tenant_id), "indicator_id": str(indicator.id)},
    )
    return IndicatorResponse.model_validate(indicator)


@router.get("", response_model=Page[IndicatorResponse], summary="List indicators")
async def list_indicators(
    access: ReadAccess,
    db: DbSession,
    params: Annotated[PageParams, Depends()],
    patient_id: Optional[UUID] = Query(None),
    service_id: Optional[UUID] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    search: Optional[str] = Query(None, description="Collaborator, sector or shift contains"),
) -> Page[IndicatorResponse]:
    criteria = []
    if patient_id is not None:
        criteria.append(Indicator.patient_id == patient_id)
    if service_id is not None:
        criteria.append(Indicator.service_id == service_id)
    if date_from is not None:
        criteria.append(Indicator.reference_date >= date_from)
    if date_to is not None:
        criteria.append(Indicator.reference_date <= date_to)
    if search:
        pattern = f"%{search}%"
        criteria.append(
            or_(
                Indicator.collaborator.ilike(pattern),
                Indicator.sector.ilike(pattern),
                Indicator.shift.ilike(pattern),
            )
        )

    items, total = await TenantScopedRepository(db, Indicator, access.tenant_id).list(
        *criteria,
        order_by=(Indicator.reference_date.desc(), Indicator.created_at.desc()),
        offset=params.offset,
        limit=params.limit,
    )
    return params.build(items, total, IndicatorResponse)


@router.get("/{indicator_id}", response_model=IndicatorResponse, summary="Get indicator")
async def get_indicator(indicator_id: UUID, access: ReadAccess, db: DbSession) -> IndicatorResponse:
    repo = TenantScopedRepository(db, Indicator, access.tenant_id)
    return IndicatorResponse.model_validate(await repo.get_or_404(indicator_id))


@router.delete(
    "/{indicator_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete indicator",
)
async def delete_indicator(indicator_id: UUID, access: WriteAccess, db: DbSession) -> Response:
    repo = TenantScopedRepository(db, Indicator, access.tenant_id)
    await repo.delete(await repo.get_or_404(indicator_id))
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
