"""Evolutions (clinical progress notes) API endpoints."""

import logging
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fisiohub.api.dependencies import DbSession
from fisiohub.api.dependencies.auth import require_access
from fisiohub.core.errors import ConflictError
from fisiohub.models.appointment import Appointment
from fisiohub.models.evolution import Evolution
from fisiohub.models.scale import BarthelScale, MrcScale
from fisiohub.schemas.common import Page, PageParams, patch_values
from fisiohub.schemas.evolution import EvolutionCreate, EvolutionResponse, EvolutionUpdate
from fisiohub.services.auth_gate import AccessContext
from fisiohub.services.repository import TenantScopedRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/evolutions")

ReadAccess = Annotated[AccessContext, Depends(require_access("evolutions:read"))]
WriteAccess = Annotated[AccessContext, Depends(require_access("evolutions:write"))]

DUPLICATE_EVOLUTION = "This appointment already has an evolution"


def evolutions_of(db: AsyncSession, access: AccessContext) -> TenantScopedRepository[Evolution]:
    return TenantScopedRepository(db, Evolution, access.tenant_id, label="Evolution")


@router.post(
    "",
    response_model=EvolutionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record evolution",
)
async def create_evolution(data: EvolutionCreate, access: WriteAccess, db: DbSession) -> EvolutionResponse:
    """
    Record the evolution of an appointment. The patient is taken from the
    appointment.

    Raises:
        404: Appointment not found in this tenant
        409: The appointment already has an evolution
    """
    repo = evolutions_of(db, access)
    appointment = await TenantScopedRepository(
        db, Appointment, access.tenant_id, label="Appointment"
    ).get_or_404(data.appointment_id)

    if await repo.exists(Evolution.appointment_id == appointment.id):
        raise ConflictError(DUPLICATE_EVOLUTION)

    evolution = Evolution(
        **data.model_dump(),
        patient_id=appointment.patient_id,
        author_id=access.user_id,
        created_by=access.user_id,
    )
    try:
        await repo.add(evolution)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(DUPLICATE_EVOLUTION) from None

    logger.info(
        "Evolution recorded",
        extra={"tenant_id": str(access.tenant_id), "evolution_id": str(evolution.id)},
    )
    return EvolutionResponse.model_validate(evolution)


@router.get("", response_model=Page[EvolutionResponse], summary="List evolutions")
async def list_evolutions(
    access: ReadAccess,
    db: DbSession,
    params: Annotated[PageParams, Depends()],
    patient_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None, description="Text contained in any note field"),
) -> Page[EvolutionResponse]:
    criteria = []
    if patient_id is not None:
        criteria.append(Evolution.patient_id == patient_id)
    if search:
        pattern = f"%{search}%"
        criteria.append(
            or_(
                Evolution.symptoms.ilike(pattern),
                Evolution.treatment.ilike(pattern),
                Evolution.observations.ilike(pattern),
                Evolution.exercises.ilike(pattern),
                Evolution.next_steps.ilike(pattern),
            )
        )

    items, total = await evolutions_of(db, access).list(
        *criteria,
        order_by=(Evolution.created_at.desc(),),
        offset=params.offset,
        limit=params.limit,
    )
    return params.build(items, total, EvolutionResponse)


@router.get("/{evolution_id}", response_model=EvolutionResponse, summary="Get evolution")
async def get_evolution(evolution_id: UUID, access: ReadAccess, db: DbSession) -> EvolutionResponse:
    return EvolutionResponse.model_validate(await evolutions_of(db, access).get_or_404(evolution_id))


@router.patch("/{evolution_id}", response_model=EvolutionResponse, summary="Update evolution")
async def update_evolution(
    evolution_id: UUID,
    data: EvolutionUpdate,
    access: WriteAccess,
    db: DbSession,
) -> EvolutionResponse:
    evolution = await evolutions_of(db, access).get_or_404(evolution_id)
    for field, value in patch_values(data).items():
        setattr(evolution, field, value)
    evolution.updated_by = access.user_id
    await db.commit()

    return EvolutionResponse.model_validate(evolution)


@router.delete(
    "/{evolution_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete evolution",
)
async def delete_evolution(evolution_id: UUID, access: WriteAccess, db: DbSession) -> Response:
    """Delete an evolution; scales recorded with it are kept and detached."""
    repo = evolutions_of(db, access)
    evolution = await repo.get_or_404(evolution_id)

    for model in (BarthelScale, MrcScale):
        await db.execute(
            update(model)
            .where(model.tenant_id == access.tenant_id, model.evolution_id == evolution.id)
            .values(evolution_id=None)
        )
    await repo.delete(evolution)
    await db.commit()

    return Response(status_code=status.HTTP_204_NO_CONTENT)
