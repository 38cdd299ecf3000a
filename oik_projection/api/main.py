"""FastAPI application factory"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from oik_projection.api.middleware import RequestIDMiddleware, MetricsMiddleware
from oik_projection.api.v1 import projection
from oik_projection.domain.exceptions import (
    AuthenticationError,
    ComputationFault,
    DomainException,
    FamilyResolutionError,
)
from oik_projection.infrastructure.observability.logging import setup_logging
from oik_projection.config import settings

# Setup structured logging
setup_logging(settings.log_level)

ERROR_STATUS = {
    AuthenticationError: 401,
    FamilyResolutionError: 404,
    ComputationFault: 500,
}


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Render domain errors as {"error": message} with their status code"""
    status_code = next((code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 500)
    message = str(exc) if status_code != 500 else "Internal server error"
    return JSONResponse(status_code=status_code, content={"error": message})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Any fault outside the domain tree still answers {"error": ...}"""
    logging.error(
        f"Unhandled error: {exc}",
        exc_info=exc,
        extra={"request_id": getattr(request.state, "request_id", "unknown")},
    )
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="OIK Projection Service",
        description="Recurring-commitment projection and advisory narrative",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(projection.router, prefix="/v1", tags=["projections"])

    return app


app = create_app()
