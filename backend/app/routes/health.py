"""
ProgressLog Backend — Health Check Route
==========================================

What:  Health check endpoint for monitoring and container probes.
How:   Pings the database through the application's Database handle.

Status levels:
    - healthy:   database answered SELECT 1
    - unhealthy: database unreachable

The endpoint always answers 200 so probes can read the body.
"""

import logging
import time

from fastapi import APIRouter, Request

from app import __version__
from app.schemas.record import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Initialized once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Probe the database and report aggregate status with uptime."""
    database = getattr(request.app.state, "db", None)
    connected = database is not None and await database.ping()
    if not connected:
        logger.warning("Health check: database unreachable")

    return HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        database="connected" if connected else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
