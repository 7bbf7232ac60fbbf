"""Dependency injection factories."""

from typing import Annotated

from fastapi import Depends, Request

from gateway.config import Settings, get_settings
from gateway.redis.client import RedisClient
from gateway.services.cache.durable import ObjectStore, RedisObjectStore
from gateway.services.cache.edge import EdgeCache
from gateway.services.image.gateway import ImageGateway
from gateway.services.transform.client import TransformClient


async def get_redis_client(request: Request) -> RedisClient:
    """Get Redis client from app state."""
    return request.app.state.redis


async def get_object_store(
    redis: Annotated[RedisClient, Depends(get_redis_client)]
) -> ObjectStore:
    """Get the durable image store."""
    return RedisObjectStore(redis)


async def get_edge_cache(request: Request) -> EdgeCache:
    """Get the process-wide edge cache from app state."""
    return request.app.state.edge_cache


async def get_transform_client(request: Request) -> TransformClient:
    """Get the shared transformation service client from app state."""
    return request.app.state.transform_client


async def get_image_gateway(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    edge: Annotated[EdgeCache, Depends(get_edge_cache)],
    store: Annotated[ObjectStore, Depends(get_object_store)],
    transformer: Annotated[TransformClient, Depends(get_transform_client)],
) -> ImageGateway:
    """Get an image gateway wired to the shared tiers."""
    return ImageGateway(
        edge=edge,
        store=store,
        transformer=transformer,
        max_age=settings.cache_max_age_seconds,
        coalescer=getattr(request.app.state, "transform_coalescer", None),
    )
