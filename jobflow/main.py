"""
JobFlow API - Main Application Entry Point

This module initializes the FastAPI application with:
- One cached gateway to the upstream job API (created in the lifespan)
- FetchFailure → 502 error mapping
- CORS middleware for frontend communication
- Prometheus metrics
- API router registration

Architecture:
    FastAPI App
    ├── Lifespan Management (gateway open/close)
    ├── CORS Middleware
    ├── Prometheus Middleware (/metrics)
    └── API Router (/api)
        ├── /jobs  - filter, sort, window and export the job collection
        └── /cache - response cache statistics
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jobflow.api import api_router
from jobflow.config import configure_logging, get_settings
from jobflow.errors import FetchFailure
from jobflow.middleware import setup_metrics
from jobflow.services.gateway import JobsGateway

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle events.

    Startup:
        Create the gateway (and its response cache) unless one was
        installed beforehand

    Shutdown:
        Close the gateway's HTTP client
    """
    configure_logging()
    if getattr(app.state, "gateway", None) is None:
        app.state.gateway = JobsGateway()
    logger.info(f"Using job API at {app.state.gateway.base_url}")
    yield
    await app.state.gateway.aclose()


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="JobFlow API",
        description="Filter, sort, page and export job listings",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_metrics(app)

    @app.exception_handler(FetchFailure)
    async def fetch_failure_handler(request: Request, exc: FetchFailure):
        return JSONResponse(
            status_code=502,
            content={"detail": str(exc), "operation": exc.operation},
        )

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    app.include_router(api_router)
    return app


app = create_app()
