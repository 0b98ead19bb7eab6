"""
Health check endpoints.
"""

import time

from fastapi import APIRouter, Depends

from fitbill import __version__
from fitbill.api.dependencies import get_dispatcher
from fitbill.application.dto.responses import HealthResponse, ProviderHealthResponse
from fitbill.core.entities import ProviderKind
from fitbill.core.services import EmailDispatcher

router = APIRouter(prefix="/api/health", tags=["health"])

# Track startup time
_start_time = time.time()


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        uptime_seconds=time.time() - _start_time,
    )


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """
    Database health check.

    Tests SQLite connectivity and response time.
    """
    from fitbill.infrastructure.storage.sqlite import get_pool

    try:
        pool = await get_pool()
        latency_ms = await pool.ping()
        db_status = ProviderHealthResponse(
            name="sqlite",
            available=True,
            latency_ms=latency_ms,
            details=pool.stats(),
        )
    except Exception as e:
        db_status = ProviderHealthResponse(name="sqlite", available=False, error=str(e))

    return HealthResponse(
        status="healthy" if db_status.available else "unhealthy",
        version=__version__,
        uptime_seconds=time.time() - _start_time,
        database=db_status,
    )


@router.get("/email", response_model=HealthResponse)
async def email_health(
    dispatcher: EmailDispatcher = Depends(get_dispatcher),
) -> HealthResponse:
    """
    Report which email provider would handle the next message.

    Never sends anything. Simulated mode is reported as degraded.
    """
    kind = dispatcher.active_kind
    email_status = ProviderHealthResponse(
        name=kind.value,
        available=kind != ProviderKind.SIMULATED,
        details={"simulated": kind == ProviderKind.SIMULATED},
    )
    return HealthResponse(
        status="healthy" if email_status.available else "degraded",
        version=__version__,
        uptime_seconds=time.time() - _start_time,
        email=email_status,
    )
