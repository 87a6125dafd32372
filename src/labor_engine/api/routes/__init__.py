"""API routes."""

from labor_engine.api.routes.for_labor import router as for_labor_router
from labor_engine.api.routes.health import router as health_router

__all__ = ["for_labor_router", "health_router"]
