"""FastAPI application factory with lifespan events."""

from __future__ import annotations

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from citenet.api.dependencies import set_sources
from citenet.api.router import api_router
from citenet.config import get_settings
from citenet.services.sources import ResearchSources
from citenet.utils.exceptions import InputValidationError
from citenet.utils.logging import bind_request_context, get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the upstream clients and the shared cache for the app's lifetime."""
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    sources = ResearchSources.from_settings(settings)
    sources.start()
    set_sources(sources)
    logger.info(
        "app_started",
        relationship_service=settings.RELATIONSHIP_BASE_URL,
        metadata_service=settings.METADATA_BASE_URL,
    )
    try:
        yield
    finally:
        await sources.close()
        set_sources(None)
        logger.info("app_stopped")


def _register_error_handlers(application: FastAPI) -> None:
    @application.exception_handler(InputValidationError)
    async def invalid_input_handler(request: Request, exc: InputValidationError) -> JSONResponse:
        logger.info("request_rejected", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc), "type": type(exc).__name__},
        )

    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_exception", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "type": type(exc).__name__},
        )


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    application = FastAPI(
        title="citenet",
        description="Citation relationship graphs over scholarly link and metadata services",
        version="0.1.0",
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    application.include_router(api_router)

    @application.middleware("http")
    async def request_context_middleware(request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        bind_request_context(request_id, method=request.method, path=request.url.path)
        started = time.monotonic()
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        logger.info(
            "request_completed",
            status=response.status_code,
            duration_ms=round((time.monotonic() - started) * 1000),
        )
        return response

    _register_error_handlers(application)
    return application


app = create_app()
