"""
Main FastAPI application for the Cheezus search service.

This file wires together all layers:
- Domain: Candidate records and scored results
- Search: Similarity, synonyms and ranking policy
- Repositories: Catalogue reads from Supabase PostgreSQL
- Services: Fetch fan-out and ranking orchestration
- Routers: HTTP endpoints
"""

import logging
import os
import time
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from . import __version__
from .config import build_ranker, load_settings
from .database import get_session_factory, init_db
from .dependencies import set_search_service
from .metrics import metrics_endpoint, track_request_metrics
from .repositories.postgres_repository import PostgresCatalogRepository
from .routers import health_router, search_router
from .services.search_service import CatalogSearchService

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(message)s",
)

# Configure structured logging
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)

INIT_DB_ON_STARTUP = os.getenv("INIT_DB_ON_STARTUP", "false").lower() == "true"


def create_search_service() -> CatalogSearchService:
    """
    Create and configure the search service with all dependencies.

    Returns:
        Configured CatalogSearchService instance
    """
    settings = load_settings()

    # The repository closes the session after each read
    db: Session = get_session_factory()()

    return CatalogSearchService(
        repository=PostgresCatalogRepository(db),
        ranker=build_ranker(settings),
        settings=settings,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting Cheezus Search Service...", version=__version__)

    # Local development only; Supabase manages the production schema
    if INIT_DB_ON_STARTUP:
        try:
            init_db()
            logger.info("Database tables initialized")
        except Exception as e:
            logger.error("Failed to initialize database", error=str(e))
            raise

    try:
        service = create_search_service()
        set_search_service(service)
        logger.info("Search service initialized")
    except Exception as e:
        logger.error("Failed to initialize search service", error=str(e))
        raise

    yield

    logger.info("Shutting down Cheezus Search Service...")
    set_search_service(None)


# Create FastAPI app
app = FastAPI(
    title="Cheezus Search Service",
    description="Fuzzy, synonym-aware search over the Cheezus cheese catalogue",
    version=__version__,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)


# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request ID middleware
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID for distributed tracing."""
    request_id = request.headers.get("X-Request-ID", f"req-{id(request)}")

    structlog.contextvars.bind_contextvars(request_id=request_id)

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    structlog.contextvars.clear_contextvars()

    return response


# Metrics middleware
@app.middleware("http")
async def track_metrics(request: Request, call_next):
    """Track Prometheus metrics."""
    start_time = time.time()

    response = await call_next(request)

    track_request_metrics(
        request.method, request.url.path, response.status_code, time.time() - start_time
    )
    return response


# Include routers
app.include_router(search_router.router)
app.include_router(health_router.router)

# Prometheus metrics endpoint
app.add_api_route("/metrics", metrics_endpoint, methods=["GET"], include_in_schema=False)


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with service information."""
    return {
        "service": "Cheezus Search Service",
        "version": __version__,
        "status": "operational",
        "docs": "/api/docs",
        "health": "/api/v1/health",
        "search": "/api/v1/search",
    }


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions."""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=True,
    )

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "internal_server_error",
            "message": "An unexpected error occurred",
            "request_id": request.headers.get("X-Request-ID"),
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cheezus_search.app:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000"))
    )
