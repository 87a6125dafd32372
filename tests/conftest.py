"""Pytest fixtures for labor engine tests."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from labor_engine.calculators.wage_rates import WageRateCache
from labor_engine.models import (
    AttendanceLog,
    Base,
    Employee,
    Payment,
    Role,
    Site,
    WageRate,
)

# In-memory SQLite shared across connections of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

WORK_DATE = date(2024, 3, 4)


class FakeClock:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def at(hour: int, minute: int = 0, day: date = WORK_DATE) -> datetime:
    """Site-local wall-clock time on the given day."""
    return datetime(day.year, day.month, day.day, hour, minute)


@pytest.fixture
async def engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def wage_cache(clock) -> WageRateCache:
    return WageRateCache(ttl_seconds=300, clock=clock)


@pytest.fixture
async def site(session) -> Site:
    site = Site(
        site_name="Harbor View Tower",
        address="12 Quay Street",
        start_date=date(2024, 1, 8),
        status="active",
    )
    session.add(site)
    await session.flush()
    return site


@pytest.fixture
async def payment(session, site) -> Payment:
    payment = Payment(
        amount=Decimal("50000.00"),
        status="pending",
        site_id=site.site_id,
        payment_date=date(2024, 3, 1),
    )
    session.add(payment)
    await session.flush()
    return payment


@pytest.fixture
async def mason_role(session) -> Role:
    """Mason role paid $18/hr."""
    role = Role(role_name="Mason", description="Brick and block work")
    session.add(role)
    await session.flush()
    session.add(
        WageRate(
            role_id=role.role_id,
            hourly_rate=Decimal("18.00"),
            effective_date=date(2024, 1, 1),
        )
    )
    await session.flush()
    return role


@pytest.fixture
async def unpriced_role(session) -> Role:
    """Role with no wage rate configured."""
    role = Role(role_name="Volunteer")
    session.add(role)
    await session.flush()
    return role


@pytest.fixture
async def employee(session, mason_role) -> Employee:
    employee = Employee(
        first_name="Dana",
        last_name="Okafor",
        email="dana.okafor@example.com",
        role_id=mason_role.role_id,
        date_hired=date(2023, 6, 1),
        status="active",
    )
    session.add(employee)
    await session.flush()
    return employee


@pytest.fixture
async def unpriced_employee(session, unpriced_role) -> Employee:
    employee = Employee(
        first_name="Sam",
        last_name="Reyes",
        email="sam.reyes@example.com",
        role_id=unpriced_role.role_id,
        date_hired=date(2023, 6, 1),
        status="active",
    )
    session.add(employee)
    await session.flush()
    return employee


@pytest.fixture
def add_attendance(session, site):
    """Insert a completed check-in / check-out pair."""

    async def _add(
        employee: Employee,
        check_in: datetime,
        check_out: datetime | None,
        site_id: int | None = None,
    ) -> AttendanceLog:
        log = AttendanceLog(
            employee_id=employee.employee_id,
            site_id=site_id if site_id is not None else site.site_id,
            check_in_time=check_in,
            check_out_time=check_out,
            status="present",
        )
        session.add(log)
        await session.flush()
        return log

    return _add
