"""Pydantic schemas for dashboard endpoints."""

from decimal import Decimal

from pydantic import BaseModel, Field


class Revenue(BaseModel):
    """Sum of prices of completed appointments."""

    today: Decimal = Decimal("0")
    this_week: Decimal = Decimal("0")
    this_month: Decimal = Decimal("0")


class DashboardStats(BaseModel):
    total_patients: int = Field(..., description="Active patients")
    total_appointments: int
    appointments_today: int
    appointments_this_week: int
    appointments_this_month: int
    revenue: Revenue
