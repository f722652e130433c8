"""Health check API endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from fisiohub.api.dependencies import AppSettings
from fisiohub.schemas.health import HealthStatus, LivenessResponse, ReadinessResponse
from fisiohub.services.health import HealthCheckService

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=LivenessResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
    description="Answers as long as the process runs; no dependency is contacted",
)
async def liveness(settings: AppSettings) -> LivenessResponse:
    return LivenessResponse(
        status=HealthStatus.HEALTHY,
        service=settings.APP_NAME,
        version=settings.APP_VERSION,
        timestamp=datetime.now(timezone.utc),
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    responses={
        200: {"description": "Service is ready to accept traffic"},
        503: {"description": "The database is unreachable"},
    },
)
async def readiness(request: Request, settings: AppSettings) -> JSONResponse:
    """
    Readiness probe.

    Checks the database and returns:
    - 200 OK: All dependencies are healthy
    - 503 Service Unavailable: At least one dependency is down
    """
    health_service = HealthCheckService(request.app.state.database, settings.APP_VERSION)
    health_response = await health_service.perform_health_check()

    status_code = status.HTTP_200_OK
    if health_response.status == HealthStatus.UNHEALTHY:
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(status_code=status_code, content=health_response.model_dump(mode="json"))


@router.get("/", tags=["Root"], summary="Service information")
async def root(settings: AppSettings) -> dict[str, str]:
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/api/docs",
    }
