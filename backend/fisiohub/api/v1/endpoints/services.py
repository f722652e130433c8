"""Clinical services API endpoints."""

import logging
from datetime import timedelta
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import distinct, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fisiohub.api.dependencies import DbSession
from fisiohub.api.dependencies.auth import require_access
from fisiohub.core.errors import ConflictError
from fisiohub.models.base import utcnow
from fisiohub.models.clinical_service import ClinicalService
from fisiohub.models.indicator import Indicator
from fisiohub.schemas.clinical_service import (
    ClinicalServiceCreate,
    ClinicalServiceDeleteResponse,
    ClinicalServiceResponse,
    ClinicalServiceStats,
    ClinicalServiceUpdate,
)
from fisiohub.schemas.common import Page, PageParams, patch_values
from fisiohub.services.auth_gate import AccessContext
from fisiohub.services.repository import TenantScopedRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/services")

ReadAccess = Annotated[AccessContext, Depends(require_access("services:read"))]
ManageAccess = Annotated[AccessContext, Depends(require_access("services:manage"))]

DUPLICATE_CODE = "A service with this code already exists"

# (name fragment, color, icon) used when the client sends none
SERVICE_STYLES = (
    ("fisio", "#10B981", "heart"),
    ("psico", "#3B82F6", "brain"),
    ("social", "#F59E0B", "users"),
    ("nutri", "#EF4444", "apple"),
    ("ocupacional", "#8B5CF6", "hand"),
)
DEFAULT_STYLE = ("#6B7280", "activity")


def default_style(name: str) -> tuple[str, str]:
    """Color and icon for a service, guessed from its name."""
    lowered = name.lower()
    for fragment, color, icon in SERVICE_STYLES:
        if fragment in lowered:
            return color, icon
    return DEFAULT_STYLE


def services_of(db: AsyncSession, access: AccessContext) -> TenantScopedRepository[ClinicalService]:
    return TenantScopedRepository(db, ClinicalService, access.tenant_id, label="Clinical service")


async def ensure_code_free(
    repo: TenantScopedRepository[ClinicalService], code: str, exclude_id: Optional[UUID] = None
) -> None:
    criteria = [ClinicalService.code == code]
    if exclude_id is not None:
        criteria.append(ClinicalService.id != exclude_id)
    if await repo.exists(*criteria):
        raise ConflictError(DUPLICATE_CODE)


async def commit_or_conflict(db: AsyncSession) -> None:
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(DUPLICATE_CODE) from None


@router.post(
    "",
    response_model=ClinicalServiceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create clinical service",
)
async def create_service(
    data: ClinicalServiceCreate, access: ManageAccess, db: DbSession
) -> ClinicalServiceResponse:
    """
    Create a clinical service.

    Raises:
        409: Code already used in this tenant
    """
    repo = services_of(db, access)
    await ensure_code_free(repo, data.code)

    color, icon = default_style(data.name)
    service = ClinicalService(
        name=data.name,
        code=data.code,
        description=data.description,
        color=data.color or color,
        icon=data.icon or icon,
        created_by=access.user_id,
    )
    await repo.add(service)
    await commit_or_conflict(db)

    logger.info(
        "Clinical service created",
        extra={"tenant_id": str(access.tenant_id), "service_code": service.code},
    )
    return ClinicalServiceResponse.model_validate(service)


@router.get("", response_model=Page[ClinicalServiceResponse], summary="List clinical services")
async def list_services(
    access: ReadAccess,
    db: DbSession,
    params: Annotated[PageParams, Depends()],
    active: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, description="Name, code or description contains"),
) -> Page[ClinicalServiceResponse]:
    criteria = []
    if active is not None:
        criteria.append(ClinicalService.is_active.is_(active))
    if search:
        pattern = f"%{search}%"
        criteria.append(
            or_(
                ClinicalService.name.ilike(pattern),
                ClinicalService.code.ilike(pattern),
                ClinicalService.description.ilike(pattern),
            )
        )

    items, total = await services_of(db, access).list(
        *criteria,
        order_by=(ClinicalService.name.asc(),),
        offset=params.offset,
        limit=params.limit,
    )
    return params.build(items, total, ClinicalServiceResponse)


@router.get("/{service_id}", response_model=ClinicalServiceResponse, summary="Get clinical service")
async def get_service(service_id: UUID, access: ReadAccess, db: DbSession) -> ClinicalServiceResponse:
    return ClinicalServiceResponse.model_validate(await services_of(db, access).get_or_404(service_id))


@router.patch("/{service_id}", response_model=ClinicalServiceResponse, summary="Update clinical service")
async def update_service(
    service_id: UUID,
    data: ClinicalServiceUpdate,
    access: ManageAccess,
    db: DbSession,
) -> ClinicalServiceResponse:
    repo = services_of(db, access)
    service = await repo.get_or_404(service_id)

    changes = patch_values(data, required=("name", "code", "color", "icon", "is_active"))
    if "code" in changes and changes["code"] != service.code:
        await ensure_code_free(repo, changes["code"], exclude_id=service.id)

    for field, value in changes.items():
        setattr(service, field, value)
    service.updated_by = access.user_id
    await commit_or_conflict(db)

    return ClinicalServiceResponse.model_validate(service)


@router.delete(
    "/{service_id}",
    response_model=ClinicalServiceDeleteResponse,
    summary="Delete clinical service",
)
async def delete_service(
    service_id: UUID, access: ManageAccess, db: DbSession
) -> ClinicalServiceDeleteResponse:
    """
    Delete a service, or only deactivate it when indicators reference it.
    """
    repo = services_of(db, access)
    service = await repo.get_or_404(service_id)

    indicators = TenantScopedRepository(db, Indicator, access.tenant_id)
    if await indicators.exists(Indicator.service_id == service.id):
        service.is_active = False
        service.updated_by = access.user_id
        await db.commit()
        logger.info(
            "Clinical service deactivated",
            extra={"tenant_id": str(access.tenant_id), "service_code": service.code},
        )
        return ClinicalServiceDeleteResponse(
            id=service.id, deleted=False, message="Service has indicators and was deactivated"
        )

    await repo.delete(service)
    await db.commit()
    logger.info(
        "Clinical service deleted",
        extra={"tenant_id": str(access.tenant_id), "service_code": service.code},
    )
    return ClinicalServiceDeleteResponse(id=service_id, deleted=True, message="Service deleted")


@router.get("/{service_id}/stats", response_model=ClinicalServiceStats, summary="Clinical service stats")
async def service_stats(service_id: UUID, access: ReadAccess, db: DbSession) -> ClinicalServiceStats:
    """Indicator totals for a service, overall and over the last 30 days."""
    service = await services_of(db, access).get_or_404(service_id)

    indicators = TenantScopedRepository(db, Indicator, access.tenant_id)
    total = await indicators.count(Indicator.service_id == service.id)
    recent = await indicators.count(
        Indicator.service_id == service.id,
        Indicator.created_at >= utcnow() - timedelta(days=30),
    )
    patients = await db.execute(
        select(func.count(distinct(Indicator.patient_id))).where(
            indicators.tenant_filter(Indicator),
            Indicator.service_id == service.id,
            Indicator.patient_id.is_not(None),
        )
    )

    return ClinicalServiceStats(
        service=ClinicalServiceResponse.model_validate(service),
        indicators_total=total,
        indicators_last_30_days=recent,
        patients_referenced=int(patients.scalar_one()),
    )
