"""Type definitions for the labor cost pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Union

ZERO = Decimal("0")


class PaymentType(str, Enum):
    """Labor payment types."""

    HOURLY = "hourly"
    MONTHLY = "monthly"
    BONUS = "bonus"
    OVERTIME = "overtime"
    COMMISSION = "commission"

    @classmethod
    def parse(cls, value: Any) -> PaymentType | None:
        """Return the matching type, or None for missing/unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class LaborStatus(str, Enum):
    """Labor record status values."""

    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class WageRateInfo:
    """Snapshot of a role's pay terms at lookup time."""

    wage_rate_id: int
    role_id: int
    hourly_rate: Decimal
    effective_date: date
    overtime_multiplier: Decimal = Decimal("1.5")
    double_time_multiplier: Decimal = Decimal("2.0")


@dataclass(frozen=True)
class AttendanceInterval:
    """One check-in / check-out pair. check_out_time is None while on site."""

    check_in_time: datetime
    check_out_time: datetime | None
    log_id: int | None = None
    site_id: int | None = None

    @property
    def is_complete(self) -> bool:
        return self.check_out_time is not None


@dataclass(frozen=True)
class AttendanceHours:
    """Hours worked in one day, split into pay buckets."""

    total_hours: Decimal = ZERO
    regular_hours: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    double_time_hours: Decimal = ZERO
    total_minutes: int = 0
    interval_count: int = 0

    @property
    def is_empty(self) -> bool:
        return self.total_minutes == 0


@dataclass(frozen=True)
class ProgressiveOvertimeConfig:
    """Per-hour escalating overtime multiplier."""

    base_multiplier: Decimal = Decimal("1.5")
    increment_per_hour: Decimal = Decimal("0.1")
    max_multiplier: Decimal | None = Decimal("3.0")
    start_after_hours: int = 8


DEFAULT_PROGRESSIVE_CONFIG = ProgressiveOvertimeConfig()


@dataclass
class CostCalculation:
    """Cost breakdown for one payment or one worked day."""

    base_cost: Decimal
    total_cost: Decimal
    tax_amount: Decimal
    net_amount: Decimal
    overtime_cost: Decimal | None = None
    bonus_amount: Decimal | None = None

    @classmethod
    def zero(cls) -> CostCalculation:
        return cls(
            base_cost=ZERO,
            total_cost=ZERO,
            tax_amount=ZERO,
            net_amount=ZERO,
            overtime_cost=ZERO,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "base_cost": self.base_cost,
            "overtime_cost": self.overtime_cost,
            "bonus_amount": self.bonus_amount,
            "total_cost": self.total_cost,
            "tax_amount": self.tax_amount,
            "net_amount": self.net_amount,
        }


@dataclass
class AttendanceCostCalculation(CostCalculation):
    """Daily cost derived from attendance.

    overtime_cost already includes double_time_cost.
    """

    attendance_hours: AttendanceHours = field(default_factory=AttendanceHours)
    wage_info: WageRateInfo | None = None
    double_time_cost: Decimal = ZERO


@dataclass
class DailyCost:
    """One non-zero day in a period breakdown."""

    work_date: date
    cost: AttendanceCostCalculation


@dataclass
class PeriodCostCalculation:
    """Cost rolled up across a date range."""

    start_date: date
    end_date: date
    total: CostCalculation
    daily_breakdown: list[DailyCost] = field(default_factory=list)
    skipped_dates: list[date] = field(default_factory=list)
    wage_info: WageRateInfo | None = None

    @property
    def days_processed(self) -> int:
        return (self.end_date - self.start_date).days + 1

    @property
    def days_with_cost(self) -> int:
        return len(self.daily_breakdown)


@dataclass
class YTDSummary:
    """Totals per payment type plus aggregate tax and net."""

    total_hourly: Decimal = ZERO
    total_monthly: Decimal = ZERO
    total_bonus: Decimal = ZERO
    total_overtime: Decimal = ZERO
    total_commission: Decimal = ZERO
    grand_total: Decimal = ZERO
    total_tax: Decimal = ZERO
    net_total: Decimal = ZERO
    record_count: int = 0
    unrecognized_count: int = 0


# ===== Payment inputs =====


@dataclass(frozen=True)
class HourlyPayment:
    hours_worked: Decimal
    hourly_rate: Decimal
    overtime_hours: Decimal = ZERO
    overtime_rate: Decimal | None = None

    payment_type: ClassVar[PaymentType] = PaymentType.HOURLY


@dataclass(frozen=True)
class MonthlyPayment:
    amount: Decimal
    bonus_amount: Decimal | None = None

    payment_type: ClassVar[PaymentType] = PaymentType.MONTHLY


@dataclass(frozen=True)
class BonusPayment:
    amount: Decimal

    payment_type: ClassVar[PaymentType] = PaymentType.BONUS


@dataclass(frozen=True)
class OvertimePayment:
    overtime_hours: Decimal
    hourly_rate: Decimal | None = None
    overtime_rate: Decimal | None = None

    payment_type: ClassVar[PaymentType] = PaymentType.OVERTIME


@dataclass(frozen=True)
class CommissionPayment:
    amount: Decimal

    payment_type: ClassVar[PaymentType] = PaymentType.COMMISSION


LaborPayment = Union[
    HourlyPayment, MonthlyPayment, BonusPayment, OvertimePayment, CommissionPayment
]
