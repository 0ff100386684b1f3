"""
FastAPI Application - Digicides blog service
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from digiblog import __version__
from digiblog.config import settings
from digiblog.database import create_tables
from digiblog.errors import BlogError
from digiblog.observability.logging import configure_logging
from digiblog.routers.blogs import router as blogs_router
from digiblog.routers.site import router as site_router
from digiblog.security import limiter

logger = logging.getLogger("digiblog.main")


# ==========================================
# Storage Initialization
# ==========================================
def init_storage() -> None:
    """Create the data directory for the file backend or the tables for SQL."""
    if settings.blog_backend == "database":
        create_tables()
    else:
        settings.blogs_path.parent.mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting blog service with %s backend", settings.blog_backend)
    init_storage()
    yield
    logger.info("Shutting down blog service")


configure_logging(
    settings.log_level.upper(), fmt=settings.log_format, sql_echo=settings.db_echo
)


# ==========================================
# Exception handlers
# ==========================================
def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


async def blog_error_handler(request: Request, exc: BlogError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return _error(exc.message, exc.status_code)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return _error("Invalid blog data", status.HTTP_400_BAD_REQUEST)
    first = errors[0]
    field = ".".join(
        str(part) for part in first.get("loc", ()) if part not in ("body", "query")
    )
    message = first.get("msg", "Invalid value")
    return _error(
        f"{field}: {message}" if field else message, status.HTTP_400_BAD_REQUEST
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return _error(
        "Rate limit exceeded. Please retry shortly.",
        status.HTTP_429_TOO_MANY_REQUESTS,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(str(exc.detail), exc.status_code)


# ==========================================
# FastAPI Application
# ==========================================
app = FastAPI(
    title="Digicides Blog",
    description="Blog publishing service with offline-first client sync",
    version=__version__,
    lifespan=lifespan,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
    openapi_url=None if settings.is_production else "/openapi.json",
)
# Order: compression → rate-limit → correlation id
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(CorrelationIdMiddleware, header_name="X-Request-ID")
app.state.limiter = limiter
app.add_exception_handler(BlogError, blog_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
if settings.allowed_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Accept", "Content-Type", "X-Request-ID"],
    )

app.include_router(blogs_router)
app.include_router(site_router)


@app.get("/healthz", tags=["system"], summary="Health check", response_model=dict)
async def health_check() -> dict:
    if settings.is_production:
        return {"status": "healthy", "backend": settings.blog_backend}
    return {
        "status": "healthy",
        "backend": settings.blog_backend,
        "version": app.version,
    }
