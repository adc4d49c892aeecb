"""
Health check implementations for the application.
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

import redis.asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from marketplace.config.logging import get_logger
from marketplace.config.settings import settings
from marketplace.infrastructure.database.connection import get_database_health

logger = get_logger(__name__)

CRITICAL_SERVICES = ("database", "redis")


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class HealthChecker:
    """Health checker for application components."""

    def __init__(
        self,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        redis_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.session_factory = session_factory
        self.redis_url = redis_url or settings.REDIS_URL
        self.timeout = timeout or settings.HEALTH_CHECK_TIMEOUT
        self.checks: Dict[str, Callable[[], Awaitable[Dict[str, Any]]]] = {
            "database": self._check_database,
            "redis": self._check_redis,
        }

    async def run_health_checks(self) -> Dict[str, Any]:
        """Run all health checks."""
        results = {}

        for check_name, check_func in self.checks.items():
            try:
                results[check_name] = await asyncio.wait_for(
                    check_func(), timeout=self.timeout
                )
            except asyncio.TimeoutError:
                logger.error("Health check timed out", check_name=check_name)
                results[check_name] = {"status": "unhealthy", "error": "timeout"}
            except Exception as e:
                logger.error("Health check failed", check_name=check_name, error=str(e))
                results[check_name] = {"status": "error", "error": str(e)}

        return results

    async def _check_database(self) -> Dict[str, Any]:
        """Check database health."""
        if self.session_factory is None:
            from marketplace.config.database import get_async_session_factory

            self.session_factory = get_async_session_factory()

        async with self.session_factory() as session:
            return await get_database_health(session)

    async def _check_redis(self) -> Dict[str, Any]:
        """Check Redis health."""
        start = time.perf_counter()
        client = aioredis.from_url(self.redis_url)
        try:
            await client.ping()
        finally:
            await client.aclose()
        return {
            "status": "healthy",
            "response_time_ms": round((time.perf_counter() - start) * 1000, 2),
        }

    async def get_overall_health(self) -> Dict[str, Any]:
        """Get overall application health status."""
        results = await self.run_health_checks()
        critical_healthy = all(
            results.get(service, {}).get("status") == "healthy"
            for service in CRITICAL_SERVICES
        )
        return {
            "status": "healthy" if critical_healthy else "unhealthy",
            "timestamp": _timestamp(),
            "services": results,
            "critical_services_healthy": critical_healthy,
        }

    async def get_service_health(self, service_name: str) -> Optional[Dict[str, Any]]:
        """Get health status for a specific service."""
        check_func = self.checks.get(service_name)
        if check_func is None:
            return None
        try:
            return await asyncio.wait_for(check_func(), timeout=self.timeout)
        except Exception as e:
            logger.error("Service health check failed", service=service_name, error=str(e))
            return {"status": "error", "error": str(e)}
