"""Pydantic schemas for Patient API."""

from datetime import date
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field

from fisiohub.schemas.common import RequestModel, ResponseModel, UTCDateTime


class PatientBase(RequestModel):
    full_name: str = Field(..., min_length=2, max_length=255, description="Patient full name")
    document: Optional[str] = Field(None, max_length=20, description="CPF, unique in the tenant")
    birth_date: Optional[date] = None
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    attendance_number: Optional[str] = Field(None, max_length=50)
    bed_number: Optional[str] = Field(None, max_length=20)
    diagnosis: Optional[str] = None
    observations: Optional[str] = None


class PatientCreate(PatientBase):
    """Schema for registering a patient."""


class PatientUpdate(RequestModel):
    """Partial update; omitted fields are left unchanged."""

    full_name: Optional[str] = Field(None, min_length=2, max_length=255)
    document: Optional[str] = Field(None, max_length=20)
    birth_date: Optional[date] = None
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    attendance_number: Optional[str] = Field(None, max_length=50)
    bed_number: Optional[str] = Field(None, max_length=20)
    diagnosis: Optional[str] = None
    observations: Optional[str] = None
    is_active: Optional[bool] = None


class PatientResponse(ResponseModel):
    id: UUID
    full_name: str
    document: Optional[str] = None
    birth_date: Optional[date] = None
    age: Optional[int] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    attendance_number: Optional[str] = None
    bed_number: Optional[str] = None
    diagnosis: Optional[str] = None
    observations: Optional[str] = None
    is_active: bool
    created_at: UTCDateTime
    updated_at: UTCDateTime


class PatientSummary(ResponseModel):
    """Compact patient reference embedded in other resources."""

    id: UUID
    full_name: str
    phone: Optional[str] = None
