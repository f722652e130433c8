"""Patients API endpoints."""

import logging
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import delete, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fisiohub.api.dependencies import DbSession
from fisiohub.api.dependencies.auth import require_access
from fisiohub.core.errors import ConflictError
from fisiohub.models.appointment import Appointment
from fisiohub.models.evolution import Evolution
from fisiohub.models.indicator import Indicator
from fisiohub.models.patient import Patient
from fisiohub.models.scale import BarthelScale, MrcScale
from fisiohub.schemas.common import Page, PageParams, patch_values
from fisiohub.schemas.patient import PatientCreate, PatientResponse, PatientUpdate
from fisiohub.services.auth_gate import AccessContext
from fisiohub.services.repository import TenantScopedRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/patients")

DUPLICATE_DOCUMENT = "A patient with this document already exists"


def patients_of(db: AsyncSession, access: AccessContext) -> TenantScopedRepository[Patient]:
    return TenantScopedRepository(db, Patient, access.tenant_id, label="Patient")


async def ensure_document_free(
    repo: TenantScopedRepository[Patient],
    document: Optional[str],
    exclude_id: Optional[UUID] = None,
) -> None:
    """Document numbers are unique within a tenant."""
    if not document:
        return
    criteria = [Patient.document == document]
    if exclude_id is not None:
        criteria.append(Patient.id != exclude_id)
    if await repo.exists(*criteria):
        raise ConflictError(DUPLICATE_DOCUMENT)


async def commit_or_conflict(db: AsyncSession) -> None:
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(DUPLICATE_DOCUMENT) from None


async def delete_dependents(db: AsyncSession, tenant_id: UUID, patient_id: UUID) -> None:
    """Remove a patient's clinical records and detach their indicators."""
    for model in (BarthelScale, MrcScale, Evolution, Appointment):
        await db.execute(
            delete(model).where(model.tenant_id == tenant_id, model.patient_id == patient_id)
        )
    await db.execute(
        update(Indicator)
        .where(Indicator.tenant_id == tenant_id, Indicator.patient_id == patient_id)
        .values(patient_id=None)
    )


@router.post(
    "",
    response_model=PatientResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register patient",
)
async def create_patient(
    data: PatientCreate,
    access: Annotated[AccessContext, Depends(require_access("patients:write"))],
    db: DbSession,
) -> PatientResponse:
    """
    Register a patient in the current tenant.

    Raises:
        409: Document already registered in this tenant
    """
    repo = patients_of(db, access)
    await ensure_document_free(repo, data.document)

    patient = Patient(**data.model_dump(), created_by=access.user_id)
    await repo.add(patient)
    await commit_or_conflict(db)

    logger.info("Patient created", extra={"tenant_id": str(access.tenant_id), "patient_id": str(patient.id)})
    return PatientResponse.model_validate(patient)


@router.get("", response_model=Page[PatientResponse], summary="List patients")
async def list_patients(
    access: Annotated[AccessContext, Depends(require_access("patients:read"))],
    db: DbSession,
    params: Annotated[PageParams, Depends()],
    search: Optional[str] = Query(None, description="Name, document, phone or email contains"),
    is_active: Optional[bool] = Query(None),
) -> Page[PatientResponse]:
    criteria = []
    if search:
        pattern = f"%{search}%"
        criteria.append(
            or_(
                Patient.full_name.ilike(pattern),
                Patient.document.ilike(pattern),
                Patient.phone.ilike(pattern),
                Patient.email.ilike(pattern),
            )
        )
    if is_active is not None:
        criteria.append(Patient.is_active.is_(is_active))

    items, total = await patients_of(db, access).list(
        *criteria,
        order_by=(Patient.full_name.asc(),),
        offset=params.offset,
        limit=params.limit,
    )
    return params.build(items, total, PatientResponse)


@router.get("/{patient_id}", response_model=PatientResponse, summary="Get patient")
async def get_patient(
    patient_id: UUID,
    access: Annotated[AccessContext, Depends(require_access("patients:read"))],
    db: DbSession,
) -> PatientResponse:
    return PatientResponse.model_validate(await patients_of(db, access).get_or_404(patient_id))


@router.patch("/{patient_id}", response_model=PatientResponse, summary="Update patient")
async def update_patient(
    patient_id: UUID,
    data: PatientUpdate,
    access: Annotated[AccessContext, Depends(require_access("patients:write"))],
    db: DbSession,
) -> PatientResponse:
    repo = patients_of(db, access)
    patient = await repo.get_or_404(patient_id)

    changes = patch_values(data, required=("full_name", "is_active"))
    if "document" in changes:
        await ensure_document_free(repo, changes["document"], exclude_id=patient.id)

    for field, value in changes.items():
        setattr(patient, field, value)
    patient.updated_by = access.user_id
    await commit_or_conflict(db)

    return PatientResponse.model_validate(patient)


@router.delete(
    "/{patient_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete patient",
)
async def delete_patient(
    patient_id: UUID,
    access: Annotated[AccessContext, Depends(require_access("patients:delete"))],
    db: DbSession,
) -> Response:
    """Delete a patient together with their appointments, evolutions and scales."""
    repo = patients_of(db, access)
    patient = await repo.get_or_404(patient_id)
    await delete_dependents(db, access.tenant_id, patient.id)
    await repo.delete(patient)
    await db.commit()

    logger.info("Patient deleted", extra={"tenant_id": str(access.tenant_id), "patient_id": str(patient_id)})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
