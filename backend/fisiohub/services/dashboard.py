"""Dashboard aggregates for the current tenant."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fisiohub.models.appointment import OPEN_STATUSES, Appointment, AppointmentStatus
from fisiohub.models.evolution import Evolution
from fisiohub.models.patient import Patient
from fisiohub.schemas.dashboard import DashboardStats, Revenue
from fisiohub.services.repository import TenantScopedRepository

CENTS = Decimal("0.01")
DASHBOARD_LIST_SIZE = 5


@dataclass(frozen=True)
class Period:
    start: datetime
    end: datetime


def _midnight(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def periods(now: datetime) -> dict[str, Period]:
    """Today, this week (Sunday start) and this month, as UTC half-open ranges."""
    today = now.astimezone(timezone.utc).date()
    week_start = today - timedelta(days=(today.weekday() + 1) % 7)
    month_start = today.replace(day=1)
    next_month = (month_start + timedelta(days=32)).replace(day=1)
    return {
        "today": Period(_midnight(today), _midnight(today + timedelta(days=1))),
        "week": Period(_midnight(week_start), _midnight(week_start + timedelta(days=7))),
        "month": Period(_midnight(month_start), _midnight(next_month)),
    }


class DashboardService:
    def __init__(self, session: AsyncSession, tenant_id: UUID) -> None:
        self.session = session
        self.tenant_id = tenant_id
        self.patients = TenantScopedRepository(session, Patient, tenant_id)
        self.appointments = TenantScopedRepository(session, Appointment, tenant_id)
        self.evolutions = TenantScopedRepository(session, Evolution, tenant_id)

    async def _revenue(self, period: Period) -> Decimal:
        result = await self.session.execute(
            select(func.coalesce(func.sum(Appointment.price), 0)).where(
                self.appointments.tenant_filter(Appointment),
                Appointment.status == AppointmentStatus.COMPLETED,
                Appointment.price.is_not(None),
                Appointment.scheduled_at >= period.start,
                Appointment.scheduled_at < period.end,
            )
        )
        return Decimal(str(result.scalar_one())).quantize(CENTS)

    async def _appointments_in(self, period: Period) -> int:
        return await self.appointments.count(
            Appointment.scheduled_at >= period.start,
            Appointment.scheduled_at < period.end,
        )

    async def stats(self, now: datetime) -> DashboardStats:
        """Patient and appointment counts plus completed-appointment revenue."""
        ranges = periods(now)
        return DashboardStats(
            total_patients=await self.patients.count(Patient.is_active.is_(True)),
            total_appointments=await self.appointments.count(),
            appointments_today=await self._appointments_in(ranges["today"]),
            appointments_this_week=await self._appointments_in(ranges["week"]),
            appointments_this_month=await self._appointments_in(ranges["month"]),
            revenue=Revenue(
                today=await self._revenue(ranges["today"]),
                this_week=await self._revenue(ranges["week"]),
                this_month=await self._revenue(ranges["month"]),
            ),
        )

    async def upcoming_appointments(self, now: datetime) -> list[Appointment]:
        """Open appointments from now until the end of the (UTC) day."""
        end_of_day = periods(now)["today"].end
        items, _ = await self.appointments.list(
            Appointment.scheduled_at >= now,
            Appointment.scheduled_at < end_of_day,
            Appointment.status.in_(OPEN_STATUSES),
            order_by=(Appointment.scheduled_at.asc(),),
            limit=DASHBOARD_LIST_SIZE,
            options=(selectinload(Appointment.patient),),
        )
        return items

    async def recent_evolutions(self) -> list[Evolution]:
        items, _ = await self.evolutions.list(
            order_by=(Evolution.created_at.desc(),),
            limit=DASHBOARD_LIST_SIZE,
            options=(selectinload(Evolution.patient),),
        )
        return items
