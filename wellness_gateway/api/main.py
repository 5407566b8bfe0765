"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from wellness_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from wellness_gateway.api.dependencies import get_request_id
from wellness_gateway.api.v1 import analysis, fees, goals, simulations
from wellness_gateway.domain.exceptions import DomainException
from wellness_gateway.infrastructure.database.session import init_db
from wellness_gateway.infrastructure.observability.logging import setup_logging
from wellness_gateway.config import settings

setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Saved simulation runs are the only table this service owns
    init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Wellness Gateway",
        description="Financial wellness analytics: spending summaries, hidden fees, projections and health scoring",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Last added runs first, so every metric sees a request ID
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException):
        logging.error(f"Unhandled domain error: {exc}", extra={"request_id": get_request_id(request)})
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(analysis.router, prefix="/v1", tags=["analysis"])
    app.include_router(fees.router, prefix="/v1", tags=["fees"])
    app.include_router(simulations.router, prefix="/v1", tags=["simulations"])
    app.include_router(goals.router, prefix="/v1", tags=["goals"])

    return app


app = create_app()
