"""Health check response schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class HealthStatus(str, Enum):
    """Health check status values."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class ServiceHealth(BaseModel):
    """Health status for individual dependency."""

    status: HealthStatus = Field(description="Dependency health status")
    response_time_ms: float | None = Field(
        default=None, description="Response time in milliseconds"
    )
    details: dict[str, str | int | float | bool] | None = Field(
        default=None, description="Additional dependency details"
    )
    error: str | None = Field(default=None, description="Error message if unhealthy")


class LivenessResponse(BaseModel):
    """Process liveness; no dependency is contacted."""

    status: HealthStatus
    service: str
    version: str
    timestamp: datetime


class ReadinessResponse(BaseModel):
    """Readiness including dependency checks."""

    status: HealthStatus = Field(description="Overall readiness")
    timestamp: datetime = Field(description="Check timestamp")
    version: str = Field(description="Application version")
    services: dict[str, ServiceHealth] = Field(description="Per-dependency status")

    class Config:
        """Pydantic config."""

        json_schema_extra = {
            "example": {
                "status": "healthy",
                "timestamp": "2025-10-20T12:00:00Z",
                "version": "1.0.0",
                "services": {
                    "database": {
                        "status": "healthy",
                        "response_time_ms": 5.2,
                        "details": {"dialect": "postgresql"},
                    },
                },
            }
        }
