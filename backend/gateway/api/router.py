"""Main API router aggregating all version routers."""

from fastapi import APIRouter

from gateway.api.v1.health import router as health_router

api_router = APIRouter()

# v1 endpoints
api_router.include_router(health_router, prefix="/v1", tags=["Health"])
