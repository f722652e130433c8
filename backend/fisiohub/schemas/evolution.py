"""Pydantic schemas for Evolution API."""

from typing import Optional
from uuid import UUID

from fisiohub.schemas.common import RequestModel, ResponseModel, UTCDateTime
from fisiohub.schemas.patient import PatientSummary


class EvolutionCreate(RequestModel):
    """Clinical progress note for an appointment of the current tenant."""

    appointment_id: UUID
    symptoms: Optional[str] = None
    treatment: Optional[str] = None
    observations: Optional[str] = None
    exercises: Optional[str] = None
    next_steps: Optional[str] = None


class EvolutionUpdate(RequestModel):
    symptoms: Optional[str] = None
    treatment: Optional[str] = None
    observations: Optional[str] = None
    exercises: Optional[str] = None
    next_steps: Optional[str] = None


class EvolutionResponse(ResponseModel):
    id: UUID
    appointment_id: UUID
    patient_id: UUID
    author_id: UUID
    symptoms: Optional[str] = None
    treatment: Optional[str] = None
    observations: Optional[str] = None
    exercises: Optional[str] = None
    next_steps: Optional[str] = None
    created_at: UTCDateTime
    updated_at: UTCDateTime


class EvolutionWithPatient(EvolutionResponse):
    patient: PatientSummary
