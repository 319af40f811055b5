"""Health check endpoints for Monte-Log.

- /health/live  - Liveness probe (always OK while the process runs)
- /health/ready - Readiness probe (database must be up; cache is optional)

The blog keeps serving from the database when the cache is down, so an
unreachable cache reports "degraded" rather than failing readiness.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from montelog.api.deps import get_context
from montelog.context import AppContext

router = APIRouter(tags=["health"])

CHECK_TIMEOUT = 5.0  # seconds


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Health status of a single component."""

    name: str
    status: HealthStatus
    latency_ms: float
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "status": self.status.value,
            "latency_ms": round(self.latency_ms, 2),
        }
        if self.message:
            result["message"] = self.message
        return result


async def check_component(
    name: str,
    probe: Callable[[], Awaitable[bool]],
    failure_status: HealthStatus = HealthStatus.UNHEALTHY,
) -> ComponentHealth:
    """Run a connectivity probe with a timeout and time it."""
    start = time.monotonic()
    try:
        healthy = await asyncio.wait_for(probe(), timeout=CHECK_TIMEOUT)
        message = None if healthy else f"{name} check failed"
    except asyncio.TimeoutError:
        healthy = False
        message = f"{name} check timed out"

    return ComponentHealth(
        name=name,
        status=HealthStatus.HEALTHY if healthy else failure_status,
        latency_ms=(time.monotonic() - start) * 1000,
        message=message,
    )


@router.get("/health/live")
async def live() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@router.get("/health/ready")
async def ready(context: AppContext = Depends(get_context)) -> JSONResponse:
    """Readiness probe.

    Returns 200 unless the database is unreachable.
    """
    components = await asyncio.gather(
        check_component("database", context.database.health_check),
        check_component("cache", context.cache.ping, failure_status=HealthStatus.DEGRADED),
    )

    if any(c.status == HealthStatus.UNHEALTHY for c in components):
        overall_status = HealthStatus.UNHEALTHY
    elif all(c.status == HealthStatus.HEALTHY for c in components):
        overall_status = HealthStatus.HEALTHY
    else:
        overall_status = HealthStatus.DEGRADED

    result = {
        "status": overall_status.value,
        "components": [c.to_dict() for c in components],
    }
    status_code = 503 if overall_status == HealthStatus.UNHEALTHY else 200
    return JSONResponse(content=result, status_code=status_code)
