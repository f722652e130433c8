"""Pydantic schemas for Appointment API."""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import Field

from fisiohub.models.appointment import AppointmentStatus
from fisiohub.schemas.common import RequestModel, ResponseModel, UTCDateTime
from fisiohub.schemas.patient import PatientSummary


class AppointmentCreate(RequestModel):
    """Schema for scheduling an appointment."""

    patient_id: UUID = Field(..., description="Patient in the current tenant")
    therapist_id: Optional[UUID] = Field(None, description="Defaults to the requesting user")
    scheduled_at: UTCDateTime = Field(..., description="Start time")
    duration_minutes: int = Field(60, ge=15, le=480)
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    notes: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)


class AppointmentUpdate(RequestModel):
    therapist_id: Optional[UUID] = None
    scheduled_at: Optional[UTCDateTime] = None
    duration_minutes: Optional[int] = Field(None, ge=15, le=480)
    status: Optional[AppointmentStatus] = None
    notes: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)


class AppointmentResponse(ResponseModel):
    id: UUID
    patient_id: UUID
    therapist_id: UUID
    scheduled_at: UTCDateTime
    duration_minutes: int
    status: AppointmentStatus
    notes: Optional[str] = None
    price: Optional[Decimal] = None
    created_at: UTCDateTime
    updated_at: UTCDateTime


class AppointmentWithPatient(AppointmentResponse):
    """Appointment with the patient embedded (dashboard lists)."""

    patient: PatientSummary
