"""FastAPI application factory for the YT2Blog API.

This module provides the main application factory with OpenAPI documentation,
CORS configuration, metrics middleware, and error mapping.
"""

import logging
import time
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

from ..config import VERSION
from ..errors import (
    ContentFetchError,
    InputValidationError,
    InvalidApiKeyError,
    PipelineError,
    UpstreamError,
    UpstreamTimeoutError,
    YT2BlogError,
    create_error_report,
)
from ..metrics import set_system_info, track_api_request
from .routes import router

logger = logging.getLogger(__name__)

# Most specific first; the first matching class decides the status
ERROR_STATUS_CODES = [
    (InputValidationError, 400),
    (InvalidApiKeyError, 401),
    (UpstreamTimeoutError, 504),
    (UpstreamError, 502),
    (ContentFetchError, 502),
    (PipelineError, 500),
]


def status_code_for(error: YT2BlogError) -> int:
    """Get the HTTP status an error is reported with."""
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_class):
            return status_code
    return 500


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware for recording HTTP request metrics."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process the request and record metrics."""
        start_time = time.time()

        response = await call_next(request)

        track_api_request(request.method, request.url.path, response.status_code, time.time() - start_time)
        return response


def create_app(
    title: str = "YT2Blog API",
    description: str = "Turn YouTube videos into polished articles with a multi-style generate, critique and refine pipeline",
    version: str = VERSION,
    enable_cors: bool = True,
    cors_origins: Optional[list] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        title: API title for OpenAPI docs.
        description: API description for OpenAPI docs.
        version: API version.
        enable_cors: Whether to enable CORS middleware.
        cors_origins: List of allowed CORS origins.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title=title,
        description=description,
        version=version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        openapi_tags=[
            {
                "name": "articles",
                "description": "Article generation, verification and instruction enhancement",
            },
        ],
    )

    if enable_cors:
        origins = cors_origins or ["*"]
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_middleware(MetricsMiddleware)

    app.include_router(router)

    @app.get("/", tags=["root"])
    async def root() -> dict:
        """Root endpoint with API information."""
        return {
            "name": title,
            "version": version,
            "docs": "/docs",
            "openapi": "/openapi.json",
        }

    @app.get("/metrics", tags=["observability"])
    async def metrics() -> Response:
        """Prometheus metrics endpoint."""
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.exception_handler(YT2BlogError)
    async def yt2blog_exception_handler(request: Request, exc: YT2BlogError) -> JSONResponse:
        """Report pipeline errors as ErrorReport bodies."""
        status_code = status_code_for(exc)
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc}")
        report = create_error_report(exc, f"{request.method} {request.url.path}")
        return JSONResponse(status_code=status_code, content=report.model_dump(mode="json"))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle uncaught exceptions."""
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    set_system_info(version=version)
    logger.info(f"Created FastAPI app: {title} v{version}")
    return app
