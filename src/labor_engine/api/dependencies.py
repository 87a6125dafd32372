"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from labor_engine.calculators.wage_rates import WageRateCache
from labor_engine.database import init_db
from labor_engine.services.labor_service import LaborService


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    _, factory = init_db()
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()


def get_wage_rate_cache(request: Request) -> WageRateCache:
    """The process-wide wage rate cache created at startup."""
    return request.app.state.wage_rate_cache


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
WageCache = Annotated[WageRateCache, Depends(get_wage_rate_cache)]


def get_labor_service(request: Request, db: DbSession, cache: WageCache) -> LaborService:
    settings = request.app.state.settings
    return LaborService(db, cache, timeout_seconds=settings.query_timeout_seconds)


Labor = Annotated[LaborService, Depends(get_labor_service)]
