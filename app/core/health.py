"""
Health check utilities for monitoring application components.

Checks:
- Database connectivity
"""

import logging
from datetime import datetime
from typing import Dict, Any

from sqlalchemy.exc import SQLAlchemyError

from app.core.database import Database

logger = logging.getLogger(__name__)


async def check_database(database: Database) -> Dict[str, Any]:
    """
    Check database connectivity.

    Returns:
        Dict with status, latency, and error (if any)
    """
    start_time = datetime.utcnow()

    try:
        await database.ping()
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Database health check failed: {e}")
        return {
            "status": "unhealthy",
            "error": str(e),
        }

    latency_ms = (datetime.utcnow() - start_time).total_seconds() * 1000
    return {
        "status": "healthy",
        "latency_ms": round(latency_ms, 2),
    }


async def get_health_metrics(database: Database) -> Dict[str, Any]:
    """
    Aggregate component checks into an overall status.

    Status values:
    - healthy: All systems operational
    - unhealthy: A critical component is down
    """
    checks = {
        "database": await check_database(database),
    }
    overall = "healthy"
    if any(check["status"] != "healthy" for check in checks.values()):
        overall = "unhealthy"

    return {
        "status": overall,
        "timestamp": datetime.utcnow().isoformat(),
        "checks": checks,
    }
