"""
Application factory for FastAPI.

This module provides the create_app() function that creates and configures
the FastAPI application instance.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from api.v1 import api_router
from app.routes import health_router, root_router
from core.config import settings
from core.exceptions import InvalidArgument, UpstreamQueryFailure
from core.lifespan import lifespan

logger = logging.getLogger(__name__)


async def invalid_argument_handler(request: Request, exc: InvalidArgument) -> JSONResponse:
    """Malformed filters and arguments -> 400."""
    logger.info(f"Rejected {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": exc.message, "field": exc.field},
    )


async def upstream_failure_handler(request: Request, exc: UpstreamQueryFailure) -> JSONResponse:
    """Record store failures -> 503. Already logged where the query failed."""
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "detail": "Report could not be generated: record store unavailable",
            "operation": exc.operation,
        },
    )


def create_app() -> FastAPI:
    """
    Application factory function.

    Creates and configures the FastAPI application with exception handlers
    and routes.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.api.app_name,
        version=settings.api.app_version,
        description="Operational analytics over citizen service requests",
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    app.add_exception_handler(InvalidArgument, invalid_argument_handler)
    app.add_exception_handler(UpstreamQueryFailure, upstream_failure_handler)

    # Include routers
    app.include_router(root_router)
    app.include_router(health_router)
    app.include_router(api_router, prefix=settings.api.api_v1_prefix)

    return app
