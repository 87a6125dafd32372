"""Labor cost calculation for payment records and attendance days."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from labor_engine.calculators.attendance import AttendanceAggregator
from labor_engine.calculators.errors import CalculationResult, ComputationError
from labor_engine.calculators.overtime import progressive_overtime_cost
from labor_engine.calculators.tax_rates import TAX_RATES, split_tax
from labor_engine.calculators.types import (
    DEFAULT_PROGRESSIVE_CONFIG,
    ZERO,
    AttendanceCostCalculation,
    AttendanceHours,
    BonusPayment,
    CommissionPayment,
    CostCalculation,
    HourlyPayment,
    LaborPayment,
    MonthlyPayment,
    OvertimePayment,
    PaymentType,
    ProgressiveOvertimeConfig,
    WageRateInfo,
)
from labor_engine.calculators.wage_rates import WageRateCache, WageRateProvider

logger = logging.getLogger(__name__)

STANDARD_OVERTIME_MULTIPLIER = Decimal("1.5")


# ===== Building payments from loose records =====


def _to_decimal(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _positive(value: Decimal | None) -> bool:
    return value is not None and value.is_finite() and value > 0


def _negative(value: Decimal | None) -> bool:
    return value is not None and value.is_finite() and value < 0


NUMERIC_FIELDS = (
    "hours_worked",
    "hourly_rate",
    "overtime_hours",
    "overtime_rate",
    "for_labor_amount",
    "bonus_amount",
)


def payment_from_fields(fields: Mapping[str, Any]) -> CalculationResult[LaborPayment]:
    """Build the typed payment variant from a loose record (payload or row).

    Every violated rule is reported, not just the first.
    """
    raw_type = fields.get("payment_type")
    if not raw_type:
        return CalculationResult.invalid(["Payment type is required"])
    payment_type = PaymentType.parse(raw_type)
    if payment_type is None:
        return CalculationResult.invalid([f"Unsupported payment type: {raw_type}"])

    errors: list[str] = []
    values: dict[str, Decimal | None] = {}
    for name in NUMERIC_FIELDS:
        try:
            values[name] = _to_decimal(fields.get(name))
        except (InvalidOperation, ValueError):
            errors.append(f"{name} must be a number")
            values[name] = None
            continue
        if values[name] is not None and not values[name].is_finite():
            errors.append(f"{name} must be a finite number")
            values[name] = None

    payment: LaborPayment
    if payment_type == PaymentType.HOURLY:
        payment = HourlyPayment(
            hours_worked=values["hours_worked"],
            hourly_rate=values["hourly_rate"],
            overtime_hours=values["overtime_hours"] or ZERO,
            overtime_rate=values["overtime_rate"],
        )
    elif payment_type == PaymentType.MONTHLY:
        payment = MonthlyPayment(
            amount=values["for_labor_amount"],
            bonus_amount=values["bonus_amount"],
        )
    elif payment_type == PaymentType.BONUS:
        payment = BonusPayment(amount=values["for_labor_amount"] or values["bonus_amount"])
    elif payment_type == PaymentType.OVERTIME:
        payment = OvertimePayment(
            overtime_hours=values["overtime_hours"],
            hourly_rate=values["hourly_rate"],
            overtime_rate=values["overtime_rate"],
        )
    else:
        payment = CommissionPayment(amount=values["for_labor_amount"])

    errors.extend(validate_payment(payment))
    if errors:
        return CalculationResult.invalid(errors)
    return CalculationResult.ok(payment)


# ===== Payment-type calculation =====


def validate_payment(payment: LaborPayment) -> list[str]:
    """Rules a typed payment must satisfy before it can be priced."""
    errors: list[str] = []
    if dataclasses.is_dataclass(payment):
        for f in dataclasses.fields(payment):
            value = getattr(payment, f.name)
            if isinstance(value, Decimal) and not value.is_finite():
                errors.append(f"{f.name} must be a finite number")
    if isinstance(payment, HourlyPayment):
        if not _positive(payment.hours_worked):
            errors.append("Hours worked must be greater than 0 for hourly payments")
        if not _positive(payment.hourly_rate):
            errors.append("Hourly rate must be greater than 0")
        if _negative(payment.overtime_hours):
            errors.append("Overtime hours cannot be negative")
    elif isinstance(payment, MonthlyPayment):
        if not _positive(payment.amount):
            errors.append("Monthly amount must be greater than 0")
        if _negative(payment.bonus_amount):
            errors.append("Bonus amount cannot be negative")
    elif isinstance(payment, (BonusPayment, CommissionPayment)):
        if not _positive(payment.amount):
            errors.append("Amount must be greater than 0")
    elif isinstance(payment, OvertimePayment):
        if not _positive(payment.overtime_hours):
            errors.append("Overtime hours must be greater than 0")
        if not (_positive(payment.overtime_rate) or _positive(payment.hourly_rate)):
            errors.append("Overtime rate or base hourly rate is required")
    else:
        errors.append(f"Unsupported payment type: {type(payment).__name__}")
    return errors


def _overtime_rate(overtime_rate: Decimal | None, hourly_rate: Decimal | None) -> Decimal:
    if overtime_rate:
        return overtime_rate
    return (hourly_rate or ZERO) * STANDARD_OVERTIME_MULTIPLIER


def _priced(
    payment_type: PaymentType,
    base_cost: Decimal,
    overtime_cost: Decimal | None = None,
    bonus_amount: Decimal | None = None,
) -> CostCalculation:
    total = base_cost + (overtime_cost or ZERO) + (bonus_amount or ZERO)
    tax, net = split_tax(total, TAX_RATES[payment_type])
    return CostCalculation(
        base_cost=base_cost,
        overtime_cost=overtime_cost,
        bonus_amount=bonus_amount,
        total_cost=total,
        tax_amount=tax,
        net_amount=net,
    )


def calculate(payment: LaborPayment) -> CalculationResult[CostCalculation]:
    """Price one explicit payment.

    | type       | base                | overtime               | bonus        | tax  |
    |------------|---------------------|------------------------|--------------|------|
    | hourly     | hours x rate        | ot_hours x ot_rate     |              | 0.15 |
    | monthly    | amount              |                        | bonus or 0   | 0.20 |
    | bonus      | 0                   |                        | amount       | 0.25 |
    | overtime   | 0                   | ot_hours x ot_rate     |              | 0.18 |
    | commission | 0                   |                        | amount       | 0.22 |

    ot_rate defaults to 1.5x the hourly rate.
    """
    errors = validate_payment(payment)
    if errors:
        return CalculationResult.invalid(errors)

    if isinstance(payment, HourlyPayment):
        cost = _priced(
            PaymentType.HOURLY,
            base_cost=payment.hours_worked * payment.hourly_rate,
            overtime_cost=payment.overtime_hours
            * _overtime_rate(payment.overtime_rate, payment.hourly_rate),
        )
    elif isinstance(payment, MonthlyPayment):
        cost = _priced(
            PaymentType.MONTHLY,
            base_cost=payment.amount,
            bonus_amount=payment.bonus_amount or ZERO,
        )
    elif isinstance(payment, BonusPayment):
        cost = _priced(PaymentType.BONUS, base_cost=ZERO, bonus_amount=payment.amount)
    elif isinstance(payment, OvertimePayment):
        cost = _priced(
            PaymentType.OVERTIME,
            base_cost=ZERO,
            overtime_cost=payment.overtime_hours
            * _overtime_rate(payment.overtime_rate, payment.hourly_rate),
        )
    else:
        cost = _priced(PaymentType.COMMISSION, base_cost=ZERO, bonus_amount=payment.amount)
    return CalculationResult.ok(cost)


# ===== Attendance-based calculation =====


def cost_from_hours(
    hours: AttendanceHours,
    wage_info: WageRateInfo,
    progressive: bool = True,
    config: ProgressiveOvertimeConfig = DEFAULT_PROGRESSIVE_CONFIG,
) -> AttendanceCostCalculation:
    """Price one day's hour buckets at the employee's wage rate.

    overtime_cost in the result includes double time.
    """
    base_rate = wage_info.hourly_rate
    base_cost = hours.regular_hours * base_rate

    overtime_cost = ZERO
    if hours.overtime_hours > 0:
        if progressive:
            overtime_cost = progressive_overtime_cost(base_rate, hours.overtime_hours, config)
        else:
            overtime_cost = hours.overtime_hours * base_rate * wage_info.overtime_multiplier

    double_time_cost = ZERO
    if hours.double_time_hours > 0:
        double_time_cost = hours.double_time_hours * base_rate * wage_info.double_time_multiplier

    total = base_cost + overtime_cost + double_time_cost
    tax, net = split_tax(total, TAX_RATES[PaymentType.HOURLY])
    return AttendanceCostCalculation(
        base_cost=base_cost,
        overtime_cost=overtime_cost + double_time_cost,
        total_cost=total,
        tax_amount=tax,
        net_amount=net,
        attendance_hours=hours,
        wage_info=wage_info,
        double_time_cost=double_time_cost,
    )


class LaborCostCalculator:
    """Labor cost calculator backed by the wage rate and attendance stores."""

    def __init__(
        self,
        session: AsyncSession,
        cache: WageRateCache | None = None,
        overtime_config: ProgressiveOvertimeConfig = DEFAULT_PROGRESSIVE_CONFIG,
    ):
        self.session = session
        self.wage_rates = WageRateProvider(session, cache)
        self.attendance = AttendanceAggregator(session)
        self.overtime_config = overtime_config

    def calculate(self, payment: LaborPayment) -> CalculationResult[CostCalculation]:
        return calculate(payment)

    def calculate_fields(self, fields: Mapping[str, Any]) -> CalculationResult[CostCalculation]:
        """Validate and price a loose labor record."""
        built = payment_from_fields(fields)
        if not built.success:
            return CalculationResult(failure=built.failure)
        return calculate(built.unwrap())

    async def calculate_from_attendance(
        self,
        employee_id: int,
        work_date: date,
        site_id: int | None = None,
        progressive: bool = True,
        wage_info: WageRateInfo | None = None,
    ) -> CalculationResult[AttendanceCostCalculation]:
        """Price one calendar day of attendance.

        A day without completed attendance yields a zero-cost result.
        """
        try:
            if wage_info is None:
                wage_info = await self.wage_rates.get_wage_rate(employee_id)
            if wage_info is None:
                return CalculationResult.wage_rate_missing(employee_id)

            hours = await self.attendance.compute_daily_hours(employee_id, work_date, site_id)
        except SQLAlchemyError as exc:
            logger.exception(
                "Failed to load attendance for employee %s on %s", employee_id, work_date
            )
            raise ComputationError(
                f"Labor cost calculation failed for employee {employee_id} on {work_date}",
                cause=exc,
            ) from exc

        return CalculationResult.ok(
            cost_from_hours(hours, wage_info, progressive, self.overtime_config)
        )
