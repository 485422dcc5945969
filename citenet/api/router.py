"""Top-level API router aggregating all v1 sub-routers."""

from __future__ import annotations

from fastapi import APIRouter

from citenet.api.v1.health import router as health_router
from citenet.api.v1.network import router as network_router
from citenet.api.v1.relationships import router as relationships_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health_router)
api_router.include_router(network_router)
api_router.include_router(relationships_router)
