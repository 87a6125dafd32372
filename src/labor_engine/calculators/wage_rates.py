"""Wage rate resolution with a short-lived per-employee cache."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from labor_engine.calculators.types import WageRateInfo
from labor_engine.models import Employee, Role

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0


@dataclass
class _CacheEntry:
    value: WageRateInfo
    expires_at: float


class WageRateCache:
    """Process-wide map of employee id -> WageRateInfo with a fixed TTL.

    Entries are checked against ``clock`` before reuse. Writes are
    last-write-wins; concurrent misses may both hit the store.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[int, _CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, employee_id: int) -> WageRateInfo | None:
        with self._lock:
            entry = self._entries.get(employee_id)
            if entry is None:
                return None
            if self._clock() >= entry.expires_at:
                del self._entries[employee_id]
                return None
            return entry.value

    def put(self, employee_id: int, value: WageRateInfo) -> None:
        with self._lock:
            self._entries[employee_id] = _CacheEntry(
                value=value, expires_at=self._clock() + self.ttl_seconds
            )

    def invalidate(self, employee_id: int | None = None) -> None:
        """Drop one employee's entry, or every entry when no id is given."""
        with self._lock:
            if employee_id is not None:
                self._entries.pop(employee_id, None)
            else:
                self._entries.clear()
        if employee_id is not None:
            logger.info("Cleared wage rate cache for employee %s", employee_id)
        else:
            logger.info("Cleared all wage rate cache entries")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class WageRateProvider:
    """Resolves an employee's hourly rate through their role.

    Returns None when the employee, role or wage rate is missing. Callers
    that cannot proceed without a rate turn that into a failure.
    """

    def __init__(self, session: AsyncSession, cache: WageRateCache | None = None):
        self.session = session
        self.cache = cache if cache is not None else WageRateCache()

    async def get_wage_rate(self, employee_id: int) -> WageRateInfo | None:
        cached = self.cache.get(employee_id)
        if cached is not None:
            return cached

        result = await self.session.execute(
            select(Employee)
            .where(Employee.employee_id == employee_id)
            .options(selectinload(Employee.role).selectinload(Role.wage_rate))
        )
        employee = result.scalar_one_or_none()
        if employee is None or employee.role is None or employee.role.wage_rate is None:
            return None

        wage_rate = employee.role.wage_rate
        info = WageRateInfo(
            wage_rate_id=wage_rate.wage_rate_id,
            role_id=wage_rate.role_id,
            hourly_rate=Decimal(wage_rate.hourly_rate),
            effective_date=wage_rate.effective_date,
        )
        self.cache.put(employee_id, info)
        return info

    def invalidate(self, employee_id: int | None = None) -> None:
        self.cache.invalidate(employee_id)
