import logging
import time
import traceback
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from dike import __version__
from dike.api.router import api_router
from dike.core.config import settings, validate_settings_for_production
from dike.core.logging import setup_logging
from dike.core.metrics import PrometheusMiddleware, metrics_response
from dike.core.middleware import RequestLoggingMiddleware
from dike.core.rate_limit import limiter
from dike.core.sentry import init_sentry
from dike.web.router import web_router

# Configure logging before anything else
setup_logging()
init_sentry()

logger = logging.getLogger(__name__)

SERVICE_NAME = "DIKE AI API"
_started_at = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    validate_settings_for_production()
    logger.info(
        "Starting %s %s (env=%s, model=%s, api key configured=%s)",
        SERVICE_NAME,
        __version__,
        settings.app_env,
        settings.analysis_model,
        bool(settings.openrouter_api_key),
    )

    yield

    logger.info("%s shut down", SERVICE_NAME)


app = FastAPI(
    title="DIKE AI",
    description="Educational equity analysis of assignments via OpenRouter",
    version=__version__,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.app_debug else None,
    redoc_url="/api/redoc" if settings.app_debug else None,
    openapi_url="/api/openapi.json" if settings.app_debug else None,
)


# Log unhandled exceptions with traceback, answer with a generic 500
@app.exception_handler(Exception)
async def _unhandled_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled %s on %s %s:\n%s", type(exc).__name__, request.method, request.url.path, "".join(tb))
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Request logging + metrics middleware
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(PrometheusMiddleware)

# CORS, allowed_origins is comma-separated
_origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.get("/api/health")
async def health():
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
        "version": __version__,
        "uptime": int(time.monotonic() - _started_at),
    }


@app.get("/metrics", include_in_schema=False)
async def metrics():
    return metrics_response()


# API routes
app.include_router(api_router)

# Frontend (catch-all, must stay last)
app.include_router(web_router)


def run() -> None:
    import uvicorn

    uvicorn.run("dike.main:app", host=settings.app_host, port=settings.app_port)
