"""
Prometheus Metrics Middleware

Provides request/response metrics for monitoring:
- HTTP request latency
- Request count by endpoint and status
- Active request gauge
- Response cache hit/miss counts
- Upstream fetch failures by operation

Usage:
    from jobflow.middleware.metrics import setup_metrics

    # In main.py
    app = FastAPI()
    setup_metrics(app)

Metrics Endpoint:
    GET /metrics - Prometheus-format metrics
"""

import time
import logging
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    CONTENT_TYPE_LATEST,
    generate_latest,
    REGISTRY,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match

logger = logging.getLogger(__name__)

# ==================== Prometheus Metrics ====================

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint", "status"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

ACTIVE_REQUESTS = Gauge(
    "http_requests_active",
    "Number of active HTTP requests",
    ["method", "endpoint"]
)

CACHE_HITS = Counter(
    "cache_hits_total",
    "Total cache hits",
    ["layer"]
)

CACHE_MISSES = Counter(
    "cache_misses_total",
    "Total cache misses",
    ["layer"]
)

UPSTREAM_LATENCY = Histogram(
    "upstream_request_seconds",
    "Upstream job API request latency",
    ["operation"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

FETCH_FAILURES = Counter(
    "upstream_fetch_failures_total",
    "Upstream job API failures",
    ["operation"]
)


# Probes and scrapes are not part of the API traffic being measured
UNMEASURED_PATHS = frozenset({"/metrics", "/health"})

# Label for requests that match no route (keeps 404 scans low-cardinality)
UNMATCHED = "<unmatched>"


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    FastAPI middleware for Prometheus metrics collection.

    Records per route pattern:
    - Request latency
    - Request count by status code (502 when the upstream job API failed)
    - Active request count
    """

    def __init__(self, app: FastAPI, skip_paths=UNMEASURED_PATHS):
        super().__init__(app)
        self.skip_paths = frozenset(skip_paths)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable
    ) -> Response:
        """Process request and record metrics."""
        # Skip scrape and health check endpoints
        if request.url.path in self.skip_paths:
            return await call_next(request)

        # Use route pattern for consistency
        endpoint = self._get_endpoint(request)
        method = request.method

        # Track in-flight requests
        ACTIVE_REQUESTS.labels(method=method, endpoint=endpoint).inc()
        start_time = time.perf_counter()
        status = "500"

        try:
            response = await call_next(request)
            status = str(response.status_code)
        except Exception as e:
            logger.error(f"Unhandled error on {method} {endpoint}: {e}")
            raise
        finally:
            duration = time.perf_counter() - start_time

            # Record metrics
            REQUEST_LATENCY.labels(method=method, endpoint=endpoint, status=status).observe(duration)
            REQUEST_COUNT.labels(method=method, endpoint=endpoint, status=status).inc()
            ACTIVE_REQUESTS.labels(method=method, endpoint=endpoint).dec()

        return response

    def _get_endpoint(self, request: Request) -> str:
        """
        Get the route pattern for a request.

        Uses the pattern (e.g., /api/jobs/{job_id}) instead of the actual
        path; paths no route matches share a single label.
        """
        for route in request.app.routes:
            match, _ = route.matches(request.scope)
            if match == Match.FULL:
                return route.path

        # Unknown path
        return UNMATCHED


def metrics_endpoint(request: Request) -> Response:
    """
    Endpoint handler for Prometheus metrics scraping.

    Returns metrics in Prometheus text format.
    """
    return PlainTextResponse(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST
    )


def setup_metrics(app: FastAPI) -> None:
    """
    Configure Prometheus metrics for FastAPI app.

    Args:
        app: FastAPI application instance
    """
    # Add middleware
    app.add_middleware(PrometheusMiddleware)

    # Add metrics endpoint
    app.add_route("/metrics", metrics_endpoint, methods=["GET"])

    logger.info("Prometheus metrics configured")


# ==================== Helper Functions ====================

def record_cache_hit(layer: str) -> None:
    """Record a cache hit for the specified layer."""
    CACHE_HITS.labels(layer=layer).inc()


def record_cache_miss(layer: str) -> None:
    """Record a cache miss for the specified layer."""
    CACHE_MISSES.labels(layer=layer).inc()


def record_upstream_latency(operation: str, duration: float) -> None:
    """Record how long an upstream request took."""
    UPSTREAM_LATENCY.labels(operation=operation).observe(duration)


def record_fetch_failure(operation: str) -> None:
    """Record a failed upstream fetch."""
    FETCH_FAILURES.labels(operation=operation).inc()
