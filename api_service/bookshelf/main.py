"""
FastAPI application — the entrypoint for the Bookshelf API.

Features:
- CORS restrictions
- Redis rate limiting middleware
- Prometheus metrics endpoint
- Structured JSON logging
- Health / readiness / liveness probes
- Graceful shutdown
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import Counter, Histogram, generate_latest
from sqlalchemy import text

from bookshelf.config import get_settings
from bookshelf.database import Base, engine
from bookshelf.logging_config import setup_logging
from bookshelf.middleware.error_handler import register_error_handlers
from bookshelf.middleware.rate_limiter import RateLimiterMiddleware
from bookshelf.models import book, profile, review, user  # noqa: F401
from bookshelf.routers import auth, books, reviews
from bookshelf.routers import profile as profile_router
from bookshelf.services.redis_pool import close_redis, get_redis

settings = get_settings()
setup_logging(settings.log_level, settings.log_format)
logger = structlog.get_logger()

# ── Prometheus metrics ──
REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint"],
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and graceful shutdown."""
    logger.info("api_service_starting", environment=settings.environment)

    # Create tables on first start (dev convenience; production runs alembic)
    if settings.environment == "development":
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_tables_created")

    yield

    logger.info("api_service_shutting_down")
    await close_redis()
    await engine.dispose()


app = FastAPI(
    title="Bookshelf",
    description="Book catalog with star-rated reviews",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ── CORS ──
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Rate Limiting ──
app.add_middleware(RateLimiterMiddleware)

# ── Error handling ──
register_error_handlers(app)


# ── Request metrics middleware ──
@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = time.time() - start

    # Route template keeps label cardinality bounded (/books/{book_id})
    route = request.scope.get("route")
    endpoint = getattr(route, "path", request.url.path)
    REQUEST_COUNT.labels(
        method=request.method,
        endpoint=endpoint,
        status=response.status_code,
    ).inc()
    REQUEST_LATENCY.labels(
        method=request.method,
        endpoint=endpoint,
    ).observe(duration)

    return response


# ── Routers ──
app.include_router(auth.router)
app.include_router(books.router)
app.include_router(reviews.router)
app.include_router(profile_router.router)


# ── Health / Readiness / Liveness ──
@app.get("/health", tags=["Health"])
async def health():
    return {"status": "healthy", "service": "api"}


@app.get("/ready", tags=["Health"])
async def readiness():
    """Readiness probe — checks DB and Redis connectivity."""
    checks = {}
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        logger.warning("readiness_database_failed", error=str(e))
        checks["database"] = "error"

    try:
        r = await get_redis()
        await r.ping()
        checks["redis"] = "ok"
    except Exception as e:
        logger.warning("readiness_redis_failed", error=str(e))
        checks["redis"] = "error"

    all_ok = all(v == "ok" for v in checks.values())
    return JSONResponse(
        status_code=200 if all_ok else 503,
        content={"status": "ready" if all_ok else "not_ready", "checks": checks},
    )


@app.get("/live", tags=["Health"])
async def liveness():
    return {"status": "alive"}


# ── Prometheus metrics endpoint ──
@app.get("/metrics", tags=["Monitoring"])
async def metrics():
    from starlette.responses import Response
    return Response(content=generate_latest(), media_type="text/plain")
