"""FastAPI application factory for the quantrisk API."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quantrisk.analysis.errors import AnalyticsError
from quantrisk.config import Settings
from quantrisk.web.cache import CacheService
from quantrisk.web.schemas import ErrorResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: initialize and cleanup resources."""
    logger.info("Starting quantrisk API...")
    yield
    logger.info("quantrisk API shutdown complete")


async def analytics_error_handler(request: Request, exc: AnalyticsError) -> JSONResponse:
    """Map engine validation failures to 422 with a machine-readable code."""
    logger.info("Rejected %s: %s", request.url.path, exc)
    body = ErrorResponse(error={"code": exc.code, "message": str(exc)})
    return JSONResponse(status_code=422, content=body.model_dump())


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="quantrisk API",
        description="GARCH volatility, Monte Carlo simulation, stress tests and performance ratios",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.cache = CacheService(ttl=settings.cache_ttl, maxsize=settings.cache_max_entries)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Accept"],
    )

    app.add_exception_handler(AnalyticsError, analytics_error_handler)

    _register_routers(app)

    return app


def _register_routers(app: FastAPI):
    """Register all API routers."""
    from quantrisk.web.routers.analysis import router as analysis_router
    from quantrisk.web.routers.system import router as system_router

    app.include_router(analysis_router, prefix="/api/v1")
    app.include_router(system_router, prefix="/api/v1")
