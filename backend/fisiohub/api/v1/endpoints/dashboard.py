"""Dashboard API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from fisiohub.api.dependencies import DbSession
from fisiohub.api.dependencies.auth import require_access
from fisiohub.models.base import utcnow
from fisiohub.schemas.appointment import AppointmentWithPatient
from fisiohub.schemas.dashboard import DashboardStats
from fisiohub.schemas.evolution import EvolutionWithPatient
from fisiohub.services.auth_gate import AccessContext
from fisiohub.services.dashboard import DashboardService

router = APIRouter(prefix="/dashboard")

DashboardAccess = Annotated[AccessContext, Depends(require_access("dashboard:read"))]


@router.get("/stats", response_model=DashboardStats, summary="Tenant statistics")
async def stats(access: DashboardAccess, db: DbSession) -> DashboardStats:
    """
    Counts of active patients and appointments (today, this week, this
    month) and revenue from completed appointments, in UTC periods.
    """
    return await DashboardService(db, access.tenant_id).stats(utcnow())


@router.get(
    "/upcoming-appointments",
    response_model=list[AppointmentWithPatient],
    summary="Next open appointments today",
)
async def upcoming_appointments(access: DashboardAccess, db: DbSession) -> list[AppointmentWithPatient]:
    items = await DashboardService(db, access.tenant_id).upcoming_appointments(utcnow())
    return [AppointmentWithPatient.model_validate(item) for item in items]


@router.get(
    "/recent-evolutions",
    response_model=list[EvolutionWithPatient],
    summary="Latest evolutions",
)
async def recent_evolutions(access: DashboardAccess, db: DbSession) -> list[EvolutionWithPatient]:
    items = await DashboardService(db, access.tenant_id).recent_evolutions()
    return [EvolutionWithPatient.model_validate(item) for item in items]
