"""Appointments API endpoints."""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fisiohub.api.dependencies import DbSession
from fisiohub.api.dependencies.auth import require_access
from fisiohub.core.errors import ConflictError, ResourceNotFoundError
from fisiohub.models.appointment import OPEN_STATUSES, Appointment, AppointmentStatus
from fisiohub.models.evolution import Evolution
from fisiohub.models.patient import Patient
from fisiohub.models.scale import BarthelScale, MrcScale
from fisiohub.models.user import User
from fisiohub.schemas.appointment import AppointmentCreate, AppointmentResponse, AppointmentUpdate
from fisiohub.schemas.common import Page, PageParams, patch_values
from fisiohub.services.auth_gate import AccessContext
from fisiohub.services.repository import TenantScopedRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments")

# Open appointments of one therapist starting this close (inclusive) collide
CONFLICT_WINDOW = timedelta(minutes=30)

ReadAccess = Annotated[AccessContext, Depends(require_access("appointments:read"))]
WriteAccess = Annotated[AccessContext, Depends(require_access("appointments:write"))]


def appointments_of(db: AsyncSession, access: AccessContext) -> TenantScopedRepository[Appointment]:
    return TenantScopedRepository(db, Appointment, access.tenant_id, label="Appointment")


async def ensure_therapist(db: AsyncSession, access: AccessContext, therapist_id: UUID) -> None:
    users = TenantScopedRepository(db, User, access.tenant_id, label="Therapist")
    therapist = await users.get_or_404(therapist_id)
    if not therapist.is_active:
        raise ResourceNotFoundError("Therapist not found")


async def ensure_slot_free(
    repo: TenantScopedRepository[Appointment],
    therapist_id: UUID,
    scheduled_at: datetime,
    exclude_id: Optional[UUID] = None,
) -> None:
    """
    Reject a scheduled/confirmed appointment of the same therapist starting
    within 30 minutes of ``scheduled_at``.
    """
    criteria = [
        Appointment.therapist_id == therapist_id,
        Appointment.status.in_(OPEN_STATUSES),
        Appointment.scheduled_at >= scheduled_at - CONFLICT_WINDOW,
        Appointment.scheduled_at <= scheduled_at + CONFLICT_WINDOW,
    ]
    if exclude_id is not None:
        criteria.append(Appointment.id != exclude_id)
    if await repo.exists(*criteria):
        raise ConflictError("Therapist already has an appointment at this time")


@router.post(
    "",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Schedule appointment",
)
async def create_appointment(
    data: AppointmentCreate,
    access: WriteAccess,
    db: DbSession,
) -> AppointmentResponse:
    """
    Schedule an appointment.

    Raises:
        404: Patient or therapist not found in this tenant
        409: Therapist already booked within 30 minutes
    """
    repo = appointments_of(db, access)
    await TenantScopedRepository(db, Patient, access.tenant_id, label="Patient").get_or_404(
        data.patient_id
    )

    therapist_id = data.therapist_id or access.user_id
    if therapist_id != access.user_id:
        await ensure_therapist(db, access, therapist_id)
    if data.status in OPEN_STATUSES:
        await ensure_slot_free(repo, therapist_id, data.scheduled_at)

    appointment = Appointment(
        **data.model_dump(exclude={"therapist_id"}),
        therapist_id=therapist_id,
        created_by=access.user_id,
    )
    await repo.add(appointment)
    await db.commit()

    logger.info(
        "Appointment scheduled",
        extra={"tenant_id": str(access.tenant_id), "appointment_id": str(appointment.id)},
    )
    return AppointmentResponse.model_validate(appointment)


@router.get("", response_model=Page[AppointmentResponse], summary="List appointments")
async def list_appointments(
    access: ReadAccess,
    db: DbSession,
    params: Annotated[PageParams, Depends()],
    on_date: Optional[date] = Query(None, alias="date", description="Day (UTC)"),
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status"),
    patient_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None, description="Patient name or notes contain"),
) -> Page[AppointmentResponse]:
    criteria = []
    if on_date is not None:
        start = datetime.combine(on_date, time.min, tzinfo=timezone.utc)
        criteria += [Appointment.scheduled_at >= start, Appointment.scheduled_at < start + timedelta(days=1)]
    if status_filter is not None:
        criteria.append(Appointment.status == status_filter)
    if patient_id is not None:
        criteria.append(Appointment.patient_id == patient_id)
    if search:
        pattern = f"%{search}%"
        matching_patients = select(Patient.id).where(
            Patient.tenant_id == access.tenant_id, Patient.full_name.ilike(pattern)
        )
        criteria.append(or_(Appointment.patient_id.in_(matching_patients), Appointment.notes.ilike(pattern)))

    items, total = await appointments_of(db, access).list(
        *criteria,
        order_by=(Appointment.scheduled_at.desc(),),
        offset=params.offset,
        limit=params.limit,
    )
    return params.build(items, total, AppointmentResponse)


@router.get("/{appointment_id}", response_model=AppointmentResponse, summary="Get appointment")
async def get_appointment(appointment_id: UUID, access: ReadAccess, db: DbSession) -> AppointmentResponse:
    return AppointmentResponse.model_validate(await appointments_of(db, access).get_or_404(appointment_id))


@router.patch("/{appointment_id}", response_model=AppointmentResponse, summary="Update appointment")
async def update_appointment(
    appointment_id: UUID,
    data: AppointmentUpdate,
    access: WriteAccess,
    db: DbSession,
) -> AppointmentResponse:
    """
    Reschedule or change the status of an appointment.

    Raises:
        409: The new slot collides with another open appointment
    """
    repo = appointments_of(db, access)
    appointment = await repo.get_or_404(appointment_id)

    changes = patch_values(
        data, required=("therapist_id", "scheduled_at", "duration_minutes", "status")
    )
    therapist_id = changes.get("therapist_id", appointment.therapist_id)
    scheduled_at = changes.get("scheduled_at", appointment.scheduled_at)
    new_status = changes.get("status", appointment.status)

    if "therapist_id" in changes and therapist_id != appointment.therapist_id:
        await ensure_therapist(db, access, therapist_id)
    if new_status in OPEN_STATUSES and {"therapist_id", "scheduled_at", "status"} & changes.keys():
        await ensure_slot_free(repo, therapist_id, scheduled_at, exclude_id=appointment.id)

    for field, value in changes.items():
        setattr(appointment, field, value)
    appointment.updated_by = access.user_id
    await db.commit()

    return AppointmentResponse.model_validate(appointment)


@router.delete(
    "/{appointment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete appointment",
)
async def delete_appointment(appointment_id: UUID, access: WriteAccess, db: DbSession) -> Response:
    """Delete an appointment and its evolution; scales recorded with it are detached."""
    repo = appointments_of(db, access)
    appointment = await repo.get_or_404(appointment_id)

    evolution_ids = select(Evolution.id).where(
        Evolution.tenant_id == access.tenant_id, Evolution.appointment_id == appointment.id
    )
    for model in (BarthelScale, MrcScale):
        await db.execute(
            update(model)
            .where(model.tenant_id == access.tenant_id, model.evolution_id.in_(evolution_ids))
            .values(evolution_id=None)
        )
    await db.execute(
        delete(Evolution).where(
            Evolution.tenant_id == access.tenant_id, Evolution.appointment_id == appointment.id
        )
    )
    await repo.delete(appointment)
    await db.commit()

    logger.info(
        "Appointment deleted",
        extra={"tenant_id": str(access.tenant_id), "appointment_id": str(appointment_id)},
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
