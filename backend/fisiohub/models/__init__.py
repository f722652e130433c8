"""Database models for FisioHub."""

from fisiohub.models.base import Base
from fisiohub.models.tenant import Tenant, TenantPlan, TenantStatus
from fisiohub.models.user import User, UserRole
from fisiohub.models.patient import Patient
from fisiohub.models.appointment import Appointment, AppointmentStatus
from fisiohub.models.evolution import Evolution
from fisiohub.models.scale import AssessmentType, BarthelScale, MrcScale
from fisiohub.models.clinical_service import ClinicalService
from fisiohub.models.indicator import Indicator

__all__ = [
    "Base",
    "Tenant",
    "TenantPlan",
    "TenantStatus",
    "User",
    "UserRole",
    "Patient",
    "Appointment",
    "AppointmentStatus",
    "Evolution",
    "AssessmentType",
    "BarthelScale",
    "MrcScale",
    "ClinicalService",
    "Indicator",
]
