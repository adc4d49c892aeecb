"""
Database connection utilities.
"""

import time
from typing import Any, Dict

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config.logging import get_logger

logger = get_logger(__name__)


async def get_database_health(session: AsyncSession) -> Dict[str, Any]:
    """Check database health with a trivial round trip."""
    try:
        start_time = time.time()
        result = await session.execute(text("SELECT 1"))
        result.scalar_one()
        response_time = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "response_time_ms": round(response_time, 2),
            "dialect": session.bind.dialect.name,
        }

    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        return {"status": "unhealthy", "error": str(e)}
