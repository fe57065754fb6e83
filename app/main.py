"""
FastAPI Application - Image Catalog API
Listing, filtering, sorting and position-in-list queries over the image catalog
"""

import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.core.errors import CatalogError
from app.core.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup and shutdown events"""
    configure_logging()
    logger.info(
        "api_starting",
        environment=settings.ENVIRONMENT,
        database=settings.DATABASE_URL.split("@")[1] if "@" in settings.DATABASE_URL else "configured",
    )
    yield
    logger.info("api_shutting_down")


# Create FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Image catalog query API: filtered, sorted listings and position-in-list lookups",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Tag every log line of a request with a request ID (taken from X-Request-ID if sent)."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    set_request_context(request_id)
    try:
        response = await call_next(request)
    finally:
        clear_request_context()
    response.headers["X-Request-ID"] = request_id
    return response


async def catalog_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Map catalog errors to HTTP responses, keeping their context for the caller."""
    assert isinstance(exc, CatalogError)
    if exc.status_code >= 500:
        logger.error(
            "catalog_internal_error",
            path=request.url.path,
            message=exc.message,
            context=exc.context,
            cause=repr(exc.__cause__),
        )
    else:
        logger.info(
            "catalog_request_rejected",
            path=request.url.path,
            status_code=exc.status_code,
            message=exc.message,
            context=exc.context,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "context": exc.context},
    )


app.add_exception_handler(CatalogError, catalog_error_handler)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint - API information"""
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint"""
    return {"status": "healthy"}


# Import and include routers
from app.api.v1 import router as api_v1_router  # noqa: E402

app.include_router(api_v1_router, prefix=settings.API_V1_STR)
