"""
Someday — FastAPI Application Entry Point

Matching & compatibility backend with:
- Async lifespan management (DB pool warm-up and disposal)
- CORS, timeout, and structured-logging middleware
- Exception handlers mapping engine errors onto HTTP status codes
- Health-check endpoints (liveness + deep readiness)
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from someday.config import get_settings
from someday.database import get_engine
from someday.exceptions import DuplicateSwipeError, InvalidVectorError, StoreUnavailableError

settings = get_settings()

# ---------------------------------------------------------------------------
# Structured logging configuration
# ---------------------------------------------------------------------------

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelName(settings.LOG_LEVEL.upper())
    ),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

logger: structlog.stdlib.BoundLogger = structlog.get_logger("someday")

REQUEST_TIMEOUT_SECONDS = 30.0
RETRY_AFTER_SECONDS = 1


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage startup and shutdown of long-lived resources."""
    logger.info(
        "startup_begin",
        environment=settings.ENVIRONMENT,
        store_backend=settings.STORE_BACKEND,
    )

    # Issuing a simple query warms the pool.
    if settings.STORE_BACKEND == "sql":
        async with get_engine().begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("database_pool_initialised")

    logger.info("startup_complete")

    yield

    logger.info("shutdown_begin")
    if settings.STORE_BACKEND == "sql":
        await get_engine().dispose()
        logger.info("database_pool_closed")
    logger.info("shutdown_complete")


# ---------------------------------------------------------------------------
# Middleware classes
# ---------------------------------------------------------------------------

class TimeoutMiddleware(BaseHTTPMiddleware):
    """Abort requests that exceed a configurable wall-clock timeout."""

    def __init__(self, app, timeout_seconds: float = REQUEST_TIMEOUT_SECONDS) -> None:
        super().__init__(app)
        self.timeout_seconds = timeout_seconds

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await asyncio.wait_for(
                call_next(request),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "request_timeout",
                method=request.method,
                path=request.url.path,
                timeout=self.timeout_seconds,
            )
            return JSONResponse(
                status_code=status.HTTP_504_GATEWAY_TIMEOUT,
                content={"detail": "Request timed out"},
            )


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.exception(
                "request_error",
                method=request.method,
                path=request.url.path,
                duration_ms=round(duration_ms, 2),
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "request_handled",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round(duration_ms, 2),
        )
        return response


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Someday",
    description="Wedding-vision matching & compatibility engine",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
)

# -- Middleware (applied in reverse order — last added runs first) ---------- #

app.add_middleware(StructuredLoggingMiddleware)
app.add_middleware(TimeoutMiddleware, timeout_seconds=REQUEST_TIMEOUT_SECONDS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -- Exception handlers ---------------------------------------------------- #


@app.exception_handler(InvalidVectorError)
async def invalid_vector_handler(request: Request, exc: InvalidVectorError) -> JSONResponse:
    logger.info("invalid_vector", path=request.url.path, fields=exc.fields)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc), "fields": exc.fields},
    )


@app.exception_handler(DuplicateSwipeError)
async def duplicate_swipe_handler(request: Request, exc: DuplicateSwipeError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "detail": str(exc),
            "user_id": exc.user_id,
            "target_id": exc.target_id,
        },
    )


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(request: Request, exc: StoreUnavailableError) -> JSONResponse:
    logger.warning(
        "store_unavailable",
        path=request.url.path,
        operation=exc.operation,
        reason=exc.reason,
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Store temporarily unavailable", "operation": exc.operation},
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )


# -- Health-check endpoints ------------------------------------------------ #


@app.get("/health", tags=["health"])
async def health_liveness() -> dict:
    """Lightweight liveness probe — always returns healthy if the process is
    running."""
    return {"status": "healthy"}


@app.get("/health/deep", tags=["health"])
async def health_deep() -> dict:
    """Deep readiness probe — verifies database connectivity."""
    result: dict = {"status": "healthy", "store": settings.STORE_BACKEND}

    if settings.STORE_BACKEND == "sql":
        try:
            async with get_engine().connect() as conn:
                await conn.execute(text("SELECT 1"))
            result["database"] = "connected"
        except Exception as exc:
            logger.error("health_db_failure", error=str(exc))
            result["database"] = f"error: {exc}"
            result["status"] = "degraded"

    return result


# -- API router ------------------------------------------------------------ #

from someday.api.router import router as api_router  # noqa: E402

app.include_router(api_router, prefix="/api/v1")
