"""Tests for attendance-based labor cost against the database."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from labor_engine.calculators.errors import (
    ComputationError,
    FailureKind,
    WageRateNotFoundError,
)
from labor_engine.calculators.labor_cost import LaborCostCalculator

from tests.conftest import WORK_DATE, at


class TestCalculateFromAttendance:
    """Pricing one calendar day from attendance logs."""

    @pytest.mark.asyncio
    async def test_nine_hour_day(self, session, employee, add_attendance):
        await add_attendance(employee, at(7), at(16))
        calculator = LaborCostCalculator(session)

        cost = (
            await calculator.calculate_from_attendance(
                employee.employee_id, WORK_DATE, progressive=False
            )
        ).unwrap()

        assert cost.attendance_hours.total_hours == Decimal("9")
        assert cost.base_cost == Decimal("144")
        assert cost.overtime_cost == Decimal("27")
        assert cost.total_cost == Decimal("171")
        assert cost.tax_amount == Decimal("25.65")
        assert cost.net_amount == Decimal("145.35")

    @pytest.mark.asyncio
    async def test_fourteen_hour_day(self, session, employee, add_attendance):
        await add_attendance(employee, at(5), at(19))
        calculator = LaborCostCalculator(session)

        cost = (
            await calculator.calculate_from_attendance(
                employee.employee_id, WORK_DATE, progressive=False
            )
        ).unwrap()

        assert cost.attendance_hours.double_time_hours == Decimal("2")
        assert cost.double_time_cost == Decimal("72")

    @pytest.mark.asyncio
    async def test_no_attendance_is_zero_not_error(self, session, employee):
        result = await LaborCostCalculator(session).calculate_from_attendance(
            employee.employee_id, WORK_DATE
        )

        assert result.success
        assert result.value.total_cost == 0
        assert result.value.attendance_hours.interval_count == 0

    @pytest.mark.asyncio
    async def test_repeat_calculation_is_identical(self, session, employee, add_attendance):
        await add_attendance(employee, at(6), at(17, 20))
        calculator = LaborCostCalculator(session)

        first = await calculator.calculate_from_attendance(employee.employee_id, WORK_DATE)
        second = await calculator.calculate_from_attendance(employee.employee_id, WORK_DATE)

        assert first.value.to_dict() == second.value.to_dict()

    @pytest.mark.asyncio
    async def test_missing_wage_rate(self, session, unpriced_employee, add_attendance):
        await add_attendance(unpriced_employee, at(7), at(15))

        result = await LaborCostCalculator(session).calculate_from_attendance(
            unpriced_employee.employee_id, WORK_DATE
        )

        assert result.failure.kind == FailureKind.NOT_FOUND
        with pytest.raises(WageRateNotFoundError) as exc_info:
            result.unwrap()
        assert exc_info.value.employee_id == unpriced_employee.employee_id

    @pytest.mark.asyncio
    async def test_unknown_employee(self, session):
        result = await LaborCostCalculator(session).calculate_from_attendance(
            9999, date(2024, 3, 4)
        )
        assert result.failure.kind == FailureKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_database_failure_wrapped(self, session, employee):
        calculator = LaborCostCalculator(session)
        calculator.attendance.compute_daily_hours = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("connection lost"))
        )

        with pytest.raises(ComputationError) as exc_info:
            await calculator.calculate_from_attendance(employee.employee_id, WORK_DATE)

        assert isinstance(exc_info.value.cause, OperationalError)
        assert exc_info.value.__cause__ is exc_info.value.cause
