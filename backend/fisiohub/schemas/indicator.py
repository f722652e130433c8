"""Pydantic schemas for Indicator API."""

from datetime import date
from typing import Annotated, Optional
from uuid import UUID

from pydantic import Field

from fisiohub.schemas.common import RequestModel, ResponseModel, UTCDateTime

Count = Annotated[int, Field(ge=0)]
Rate = Annotated[float, Field(ge=0, le=100, description="Percentage (0-100)")]


class IndicatorFields(RequestModel):
    """Indicator counters (>= 0) and rates (0-100)."""

    # Hospitalization
    patients_hospitalized: Optional[Count] = None
    patients_prescribed: Optional[Count] = None
    patients_captured: Optional[Count] = None
    discharges: Optional[Count] = None
    intubations: Optional[Count] = None

    # Respiratory
    respiratory_therapy_count: Optional[Count] = None
    extubation_effectiveness_rate: Optional[Rate] = None
    deaths: Optional[Count] = None
    cardiac_arrests: Optional[Count] = None
    respiratory_therapy_rate: Optional[Rate] = None

    # Motor
    motor_therapy_rate: Optional[Rate] = None
    artificial_airway_patients: Optional[Count] = None
    aspiration_rate: Optional[Rate] = None

    # Mobilization
    sedestation_expected: Optional[Count] = None
    sedestation_rate: Optional[Rate] = None
    orthostatism_expected: Optional[Count] = None
    orthostatism_rate: Optional[Rate] = None
    ambulation_rate: Optional[Rate] = None

    # Other
    pronations: Optional[Count] = None
    oxygen_therapy_patients: Optional[Count] = None
    multidisciplinary_visits: Optional[Count] = None
    non_invasive_ventilation_rate: Optional[Rate] = None
    invasive_mechanical_ventilation_rate: Optional[Rate] = None
    tracheostomies: Optional[Count] = None
    non_ambulating_patients: Optional[Count] = None
    falls_and_incidents: Optional[Count] = None


class IndicatorCreate(IndicatorFields):
    """Snapshot of a sector's indicators for a date and shift."""

    reference_date: date = Field(default_factory=date.today)
    patient_id: Optional[UUID] = None
    service_id: Optional[UUID] = None
    collaborator: Optional[str] = Field(None, max_length=255)
    sector: Optional[str] = Field(None, max_length=100)
    shift: Optional[str] = Field(None, max_length=50)


class IndicatorResponse(ResponseModel):
    id: UUID
    recorded_by: UUID
    patient_id: Optional[UUID] = None
    service_id: Optional[UUID] = None
    reference_date: date
    collaborator: Optional[str] = None
    sector: Optional[str] = None
    shift: Optional[str] = None

    patients_hospitalized: Optional[int] = None
    patients_prescribed: Optional[int] = None
    patients_captured: Optional[int] = None
    discharges: Optional[int] = None
    intubations: Optional[int] = None
    respiratory_therapy_count: Optional[int] = None
    extubation_effectiveness_rate: Optional[float] = None
    deaths: Optional[int] = None
    cardiac_arrests: Optional[int] = None
    respiratory_therapy_rate: Optional[float] = None
    motor_therapy_rate: Optional[float] = None
    artificial_airway_patients: Optional[int] = None
    aspiration_rate: Optional[float] = None
    sedestation_expected: Optional[int] = None
    sedestation_rate: Optional[float] = None
    orthostatism_expected: Optional[int] = None
    orthostatism_rate: Optional[float] = None
    ambulation_rate: Optional[float] = None
    pronations: Optional[int] = None
    oxygen_therapy_patients: Optional[int] = None
    multidisciplinary_visits: Optional[int] = None
    non_invasive_ventilation_rate: Optional[float] = None
    invasive_mechanical_ventilation_rate: Optional[float] = None
    tracheostomies: Optional[int] = None
    non_ambulating_patients: Optional[int] = None
    falls_and_incidents: Optional[int] = None

    created_at: UTCDateTime
