"""Health check endpoints."""

import time
from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import APIRouter, Depends

from gateway.dependencies import get_redis_client, get_transform_client
from gateway.models.schemas.common import (
    DetailedHealthResponse,
    HealthResponse,
    ServiceHealth,
)
from gateway.redis.client import RedisClient
from gateway.services.transform.client import TransformClient

router = APIRouter(prefix="/health")


async def _check_service(check: Callable[[], Awaitable[bool]]) -> ServiceHealth:
    start = time.time()
    healthy = await check()
    latency = (time.time() - start) * 1000

    if healthy:
        return ServiceHealth(status="ok", latency_ms=round(latency, 2))
    return ServiceHealth(status="error", error="Connection failed")


@router.get("", response_model=HealthResponse)
async def health_check():
    """
    Basic health check for load balancers.

    Returns 200 if service is running.
    """
    return HealthResponse(status="ok")


@router.get("/ready", response_model=DetailedHealthResponse)
async def readiness_check(
    redis: Annotated[RedisClient, Depends(get_redis_client)],
    transformer: Annotated[TransformClient, Depends(get_transform_client)],
):
    """
    Readiness check verifying the durable store and transformation service.

    Reports "degraded" if either is unreachable.
    """
    services = {
        "redis": await _check_service(redis.health_check),
        "transform": await _check_service(transformer.health_check),
    }

    overall_status = "ok"
    if any(service.status != "ok" for service in services.values()):
        overall_status = "degraded"

    return DetailedHealthResponse(status=overall_status, services=services)
