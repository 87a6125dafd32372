"""Labor cost rolled up over a date range."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from datetime import date, timedelta

from sqlalchemy.exc import SQLAlchemyError

from labor_engine.calculators.errors import CalculationResult, ComputationError
from labor_engine.calculators.labor_cost import LaborCostCalculator
from labor_engine.calculators.types import (
    ZERO,
    CostCalculation,
    DailyCost,
    PeriodCostCalculation,
)

logger = logging.getLogger(__name__)


def iter_dates(start_date: date, end_date: date) -> Iterator[date]:
    """Every calendar date from start_date to end_date inclusive."""
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


class PeriodAggregator:
    """Walks a date range day by day and sums attendance-based costs.

    The wage rate is resolved once for the whole period, so every day is
    priced at the rate in force when the calculation runs.
    """

    def __init__(self, calculator: LaborCostCalculator, timeout_seconds: float | None = None):
        self.calculator = calculator
        self.timeout_seconds = timeout_seconds

    async def calculate_for_period(
        self,
        employee_id: int,
        start_date: date,
        end_date: date,
        site_id: int | None = None,
        progressive: bool = True,
    ) -> CalculationResult[PeriodCostCalculation]:
        if end_date < start_date:
            return CalculationResult.invalid(["End date must not be before start date"])

        try:
            async with asyncio.timeout(self.timeout_seconds):
                return await self._walk(employee_id, start_date, end_date, site_id, progressive)
        except TimeoutError as exc:
            logger.error(
                "Period calculation for employee %s (%s to %s) exceeded %ss",
                employee_id,
                start_date,
                end_date,
                self.timeout_seconds,
            )
            raise ComputationError(
                f"Period labor cost calculation timed out for employee {employee_id}",
                cause=exc,
            ) from exc

    async def _walk(
        self,
        employee_id: int,
        start_date: date,
        end_date: date,
        site_id: int | None,
        progressive: bool,
    ) -> CalculationResult[PeriodCostCalculation]:
        try:
            wage_info = await self.calculator.wage_rates.get_wage_rate(employee_id)
        except SQLAlchemyError as exc:
            logger.exception("Failed to load wage rate for employee %s", employee_id)
            raise ComputationError(
                f"Period labor cost calculation failed for employee {employee_id}",
                cause=exc,
            ) from exc
        if wage_info is None:
            return CalculationResult.wage_rate_missing(employee_id)

        period = PeriodCostCalculation(
            start_date=start_date,
            end_date=end_date,
            total=CostCalculation.zero(),
            wage_info=wage_info,
        )
        base = overtime = gross = tax = net = ZERO

        for work_date in iter_dates(start_date, end_date):
            daily = await self.calculator.calculate_from_attendance(
                employee_id,
                work_date,
                site_id=site_id,
                progressive=progressive,
                wage_info=wage_info,
            )
            cost = daily.unwrap()
            if cost.total_cost <= 0:
                period.skipped_dates.append(work_date)
                continue

            period.daily_breakdown.append(DailyCost(work_date=work_date, cost=cost))
            base += cost.base_cost
            overtime += cost.overtime_cost or ZERO
            gross += cost.total_cost
            tax += cost.tax_amount
            net += cost.net_amount

        period.total = CostCalculation(
            base_cost=base,
            overtime_cost=overtime,
            total_cost=gross,
            tax_amount=tax,
            net_amount=net,
        )
        return CalculationResult.ok(period)
