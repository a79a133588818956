"""
EchoNote Backend — Health Check Route
=======================================

What:  GET /health for monitoring and load balancer probes.
How:   Pings the database and asks the LLM provider whether it is reachable.

Status levels:
    - healthy:   database connected, AI available
    - degraded:  database connected, AI unavailable or not configured
    - unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends, Response, status

from echonote import __version__
from echonote.context import AppContext, get_context
from echonote.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Initialized once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(
    response: Response,
    context: AppContext = Depends(get_context),
) -> HealthResponse:
    db_status = "connected"
    ai_status = "available"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        await context.database.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check AI provider ─────────────────────────────────────────────────
    if not context.llm.is_configured:
        ai_status = "not_configured"
    elif not await context.llm.health_check():
        ai_status = "unavailable"
    if ai_status != "available" and overall == "healthy":
        overall = "degraded"

    if overall == "unhealthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        ai=ai_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
