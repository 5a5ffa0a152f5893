"""
CityGuide Backend — Health Check Route
========================================

What:  GET /api/health for monitoring and load balancer probes. No auth.
How:   Runs SELECT 1 on a request-scoped session. A reachable process with an
       unreachable database reports "degraded" and still answers 200, so the
       probe can tell the two failures apart.
"""

import logging
import time

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cityguide import __version__
from cityguide.database import get_db_session
from cityguide.schemas.common import ApiResponse, HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/api/health",
    response_model=ApiResponse[HealthResponse],
    summary="Service health check",
)
async def health_check(db: AsyncSession = Depends(get_db_session)) -> ApiResponse[HealthResponse]:
    db_status = "connected"
    overall = "healthy"

    try:
        await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "degraded"
        await db.rollback()
        logger.warning("Health check: database unreachable: %s", str(e))

    return ApiResponse(
        message="Server is running",
        data=HealthResponse(
            status=overall,
            version=__version__,
            database=db_status,
            uptime_seconds=round(time.time() - _start_time, 2),
        ),
    )
