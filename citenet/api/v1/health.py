"""Health and readiness probe endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from citenet.api.dependencies import get_sources
from citenet.services.sources import ResearchSources

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    return {"status": "healthy"}


@router.get("/ready")
async def ready(sources: ResearchSources = Depends(get_sources)) -> dict:
    cache = sources.cache
    return {
        "status": "ready",
        "cache_enabled": cache is not None,
        "cache_entries": len(cache) if cache is not None else 0,
    }
