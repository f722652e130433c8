"""Health check service for monitoring system dependencies."""

import logging
import time
from datetime import datetime, timezone

from fisiohub.core.database import Database
from fisiohub.schemas.health import HealthStatus, ReadinessResponse, ServiceHealth

logger = logging.getLogger(__name__)


class HealthCheckService:
    """Checks the dependencies the API cannot serve without."""

    def __init__(self, database: Database, version: str) -> None:
        self.database = database
        self.version = version

    async def check_database(self) -> ServiceHealth:
        """
        Check database health.

        Tests:
        - Connection availability
        - Simple query execution
        - Response time

        Returns:
            ServiceHealth with database status
        """
        start_time = time.time()
        try:
            await self.database.ping()
            response_time_ms = (time.time() - start_time) * 1000
            return ServiceHealth(
                status=HealthStatus.HEALTHY,
                response_time_ms=response_time_ms,
                details={"dialect": self.database.engine.dialect.name},
            )

        except Exception as e:
            logger.error(f"Database health check failed: {e}", exc_info=True)
            response_time_ms = (time.time() - start_time) * 1000
            return ServiceHealth(
                status=HealthStatus.UNHEALTHY,
                response_time_ms=response_time_ms,
                error=str(e),
            )

    async def perform_health_check(self) -> ReadinessResponse:
        """
        Check every dependency.

        Returns:
            ReadinessResponse, unhealthy when any dependency is
        """
        services = {"database": await self.check_database()}

        overall_status = HealthStatus.HEALTHY
        if any(s.status == HealthStatus.UNHEALTHY for s in services.values()):
            overall_status = HealthStatus.UNHEALTHY

        return ReadinessResponse(
            status=overall_status,
            timestamp=datetime.now(timezone.utc),
            version=self.version,
            services=services,
        )
