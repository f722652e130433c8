"""API v1 router configuration."""

from fastapi import APIRouter

from fisiohub.api.v1.endpoints import (
    appointments,
    auth,
    dashboard,
    evolutions,
    indicators,
    patients,
    scales,
    services,
    tenants,
    users,
)

# Mounted twice by the application: at /api and at /api/t/{tenant_slug}
api_router = APIRouter()

api_router.include_router(auth.router, tags=["Auth"])
api_router.include_router(tenants.router, tags=["Tenants"])
api_router.include_router(users.router, tags=["Users"])
api_router.include_router(patients.router, tags=["Patients"])
api_router.include_router(appointments.router, tags=["Appointments"])
api_router.include_router(evolutions.router, tags=["Evolutions"])
api_router.include_router(scales.barthel_router, tags=["Scales"])
api_router.include_router(scales.mrc_router, tags=["Scales"])
api_router.include_router(scales.router, tags=["Scales"])
api_router.include_router(indicators.router, tags=["Indicators"])
api_router.include_router(services.router, tags=["Clinical services"])
api_router.include_router(dashboard.router, tags=["Dashboard"])
