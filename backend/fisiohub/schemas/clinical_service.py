"""Pydantic schemas for clinical services."""

from typing import Optional
from uuid import UUID

from pydantic import Field

from fisiohub.schemas.common import SLUG_PATTERN, RequestModel, ResponseModel, UTCDateTime

COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class ClinicalServiceCreate(RequestModel):
    """Color and icon default from the service name when omitted."""

    name: str = Field(..., min_length=2, max_length=255)
    code: str = Field(..., pattern=SLUG_PATTERN, description="Unique in the tenant")
    description: Optional[str] = None
    color: Optional[str] = Field(None, pattern=COLOR_PATTERN)
    icon: Optional[str] = Field(None, max_length=50)


class ClinicalServiceUpdate(RequestModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    code: Optional[str] = Field(None, pattern=SLUG_PATTERN)
    description: Optional[str] = None
    color: Optional[str] = Field(None, pattern=COLOR_PATTERN)
    icon: Optional[str] = Field(None, max_length=50)
    is_active: Optional[bool] = None


class ClinicalServiceResponse(ResponseModel):
    id: UUID
    name: str
    code: str
    description: Optional[str] = None
    color: str
    icon: str
    is_active: bool
    created_at: UTCDateTime
    updated_at: UTCDateTime


class ClinicalServiceDeleteResponse(ResponseModel):
    id: UUID
    deleted: bool = Field(..., description="False when the service was deactivated instead")
    message: str


class ClinicalServiceStats(ResponseModel):
    service: ClinicalServiceResponse
    indicators_total: int
    indicators_last_30_days: int
    patients_referenced: int
