"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from gateway.api.router import api_router
from gateway.api.v1.images import router as images_router
from gateway.config import get_settings
from gateway.middleware.error_handler import setup_exception_handlers
from gateway.middleware.observability import get_logger, setup_observability
from gateway.middleware.request_id import RequestIDMiddleware
from gateway.redis.client import RedisClient
from gateway.services.cache.edge import EdgeCache
from gateway.services.transform.client import TransformClient
from gateway.services.transform.singleflight import SingleFlight

settings = get_settings()

# Get structured logger (configured in setup_observability)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    # Startup
    logger.info(f"Starting {settings.app_name}...")

    if not settings.allowed_source_hosts_list:
        logger.warning("ALLOWED_SOURCE_HOSTS is empty; every source will be rejected")

    redis_client = RedisClient(settings)
    await redis_client.connect()
    app.state.redis = redis_client
    logger.info("Redis initialized")

    transform_client = TransformClient(settings=settings)
    app.state.transform_client = transform_client
    app.state.edge_cache = EdgeCache(
        max_entries=settings.edge_cache_max_entries,
        enabled=settings.edge_cache_enabled,
    )
    app.state.transform_coalescer = SingleFlight() if settings.coalesce_transforms else None
    logger.info(f"Transformation service: {settings.transform_base_url}")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await transform_client.close()
    await redis_client.disconnect()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Application factory."""
    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        description="Image delivery gateway with edge and durable caching",
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # Observability (structured logging, request logging)
    setup_observability(app)

    # Request ID middleware (added last so it wraps request logging)
    app.add_middleware(RequestIDMiddleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routes
    app.include_router(api_router, prefix="/api")
    app.include_router(images_router, tags=["Images"])

    return app


app = create_app()
