"""Prometheus metrics for the application."""

import time

from prometheus_client import Counter, Histogram, Info, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from dike import __version__

# --- Metrics ---

APP_INFO = Info("app", "DIKE AI application info")
APP_INFO.info({"version": __version__, "name": "dike"})

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30, 60],
)

UPSTREAM_CALLS = Counter(
    "openrouter_calls_total",
    "Total OpenRouter chat-completion calls",
    ["purpose", "outcome"],
)

NORMALIZER_OUTCOMES = Counter(
    "normalizer_outcomes_total",
    "Analysis records produced, by response shape",
    ["shape"],
)


# --- Middleware ---

# Everything outside the API collapses into one label (SPA routes, assets)
_API_PREFIX = "/api/"


def _normalize_path(path: str) -> str:
    """Collapse non-API paths to avoid high cardinality."""
    if path.startswith(_API_PREFIX) or path == "/metrics":
        return path
    return "/{static}"


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Collect HTTP request metrics for Prometheus."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        path = _normalize_path(request.url.path)

        start = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start

        REQUEST_COUNT.labels(method=method, path=path, status=response.status_code).inc()
        REQUEST_DURATION.labels(method=method, path=path).observe(duration)

        return response


def metrics_response() -> Response:
    """Generate Prometheus /metrics response."""
    return Response(
        content=generate_latest(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
