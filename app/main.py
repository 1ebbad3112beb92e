"""FastAPI application entry point.

Product catalog service: product lifecycle management and the approval
workflow.
"""

import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import __version__
from app.config import settings
from app.core.access_policy import get_access_policy
from app.core.exceptions import CatalogError, InternalError
from app.infra.database import close_db_engine, init_db, verify_db_connection
from app.infra.logging import bind_request_context, clear_request_context, get_logger, setup_logging
from app.schemas.common import ErrorResponse

# Import routers
from app.api.routes.categories import router as categories_router
from app.api.routes.health import router as health_router
from app.api.routes.lifecycle import router as lifecycle_router
from app.api.routes.pricing import router as pricing_router

# Setup logging first
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Startup:
    - Load the access policy (fails fast on a broken policy file)
    - Create tables when configured to
    - Verify database connection

    Shutdown:
    - Close database connections
    """
    logger.info(
        "Product catalog service starting",
        environment=settings.environment,
        version=__version__,
    )

    policy = get_access_policy()
    logger.info("Authorization configured", enabled=policy.enabled, version=policy.version)

    if settings.db_create_tables:
        await init_db()

    db_ok = await verify_db_connection()
    if not db_ok:
        logger.warning("Database connection failed - will retry on first request")

    yield

    logger.info("Product catalog service shutting down")
    await close_db_engine()
    get_access_policy.cache_clear()
    logger.info("Cleanup complete")


app = FastAPI(
    title="Product Catalog Service",
    description="Product lifecycle management, approval workflow and pricing",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.environment == "dev" else None,
    redoc_url=None,
)

if settings.environment == "dev":
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request with a correlation id."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    clear_request_context()
    bind_request_context(request_id=request_id)

    start_time = time.time()
    logger.info("Request received", method=request.method, path=request.url.path)
    try:
        response = await call_next(request)
        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=duration_ms,
        )
        response.headers["X-Request-ID"] = request_id
        return response
    finally:
        clear_request_context()


# =============================================================================
# Exception Handlers
# =============================================================================


def error_response(
    status_code: int,
    message: str,
    error_type: str,
    detail: dict[str, Any] | None = None,
) -> JSONResponse:
    body = ErrorResponse(message=message, error_type=error_type, detail=detail or None)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    """Render typed service errors with their own status code."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "Request failed",
        error=exc.message,
        error_type=type(exc).__name__,
        status_code=exc.status_code,
        path=request.url.path,
    )
    return error_response(exc.status_code, exc.message, type(exc).__name__, exc.details)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies and parameters are client errors (400)."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "; ".join(parts) or "Invalid request",
        "ValidationError",
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = "Route not found" if exc.status_code == status.HTTP_404_NOT_FOUND else str(exc.detail)
    return error_response(exc.status_code, message, "HTTPException")


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Persistence failures surface as InternalError."""
    logger.error(
        "Database error",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        exc_info=True,
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        InternalError.__name__,
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions."""
    logger.error(
        "Unhandled exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        exc_info=True,
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        type(exc).__name__,
    )


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(health_router, tags=["Health"])
app.include_router(lifecycle_router, prefix="/api/products", tags=["Product Lifecycle"])
app.include_router(categories_router, prefix="/api/categories", tags=["Categories"])
app.include_router(pricing_router, prefix="/api/pricing", tags=["Pricing"])


@app.get("/")
async def root() -> dict:
    """Root endpoint - basic service info."""
    return {
        "service": settings.service_name,
        "version": __version__,
        "environment": settings.environment,
    }
