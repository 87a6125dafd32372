"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from labor_engine import __version__
from labor_engine.api.routes import for_labor_router, health_router
from labor_engine.calculators.errors import (
    ComputationError,
    ValidationError,
    WageRateNotFoundError,
)
from labor_engine.calculators.wage_rates import WageRateCache
from labor_engine.config import Settings, configure_logging, get_settings
from labor_engine.database import dispose_db, init_db
from labor_engine.services.labor_service import RecordNotFoundError
from labor_engine.services.state_machine import InvalidTransitionError, RecordLockedError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    configure_logging(app.state.settings)
    init_db()
    logger.info("Labor engine %s started", app.state.settings.engine_version)
    yield
    # Shutdown
    await dispose_db()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Site Labor Engine API",
        description="Labor cost calculation for construction-site payroll",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.wage_rate_cache = WageRateCache(ttl_seconds=settings.wage_rate_cache_ttl_seconds)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(ValidationError)
    async def validation_exception_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "detail": str(exc),
                "code": "VALIDATION_ERROR",
                "errors": exc.errors,
            },
        )

    @app.exception_handler(WageRateNotFoundError)
    async def wage_rate_exception_handler(
        request: Request, exc: WageRateNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "detail": str(exc),
                "code": "WAGE_RATE_NOT_FOUND",
                "context": {"employee_id": exc.employee_id},
            },
        )

    @app.exception_handler(RecordNotFoundError)
    async def not_found_exception_handler(
        request: Request, exc: RecordNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": str(exc), "code": "NOT_FOUND"},
        )

    @app.exception_handler(InvalidTransitionError)
    async def transition_exception_handler(
        request: Request, exc: InvalidTransitionError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "detail": str(exc),
                "code": "INVALID_TRANSITION",
                "context": {"from_status": exc.from_status, "to_status": exc.to_status},
            },
        )

    @app.exception_handler(RecordLockedError)
    async def locked_exception_handler(
        request: Request, exc: RecordLockedError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "detail": str(exc),
                "code": "RECORD_LOCKED",
                "context": {"status": exc.status, "action": exc.action},
            },
        )

    @app.exception_handler(ComputationError)
    async def computation_exception_handler(
        request: Request, exc: ComputationError
    ) -> JSONResponse:
        logger.error("Labor cost computation failed: %s", exc, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": str(exc), "code": "COMPUTATION_ERROR"},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(for_labor_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
