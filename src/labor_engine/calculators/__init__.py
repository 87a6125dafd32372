"""Labor cost calculation engine."""

from labor_engine.calculators.attendance import AttendanceAggregator, aggregate_intervals, split_hours
from labor_engine.calculators.errors import (
    CalculationFailure,
    CalculationResult,
    ComputationError,
    FailureKind,
    LaborCalculationError,
    ValidationError,
    WageRateNotFoundError,
)
from labor_engine.calculators.labor_cost import (
    LaborCostCalculator,
    calculate,
    cost_from_hours,
    payment_from_fields,
    validate_payment,
)
from labor_engine.calculators.overtime import progressive_overtime_cost, rate_for_hour
from labor_engine.calculators.period import PeriodAggregator
from labor_engine.calculators.tax_rates import TAX_RATES, tax_rate_for
from labor_engine.calculators.wage_rates import WageRateCache, WageRateProvider
from labor_engine.calculators.ytd import aggregate_ytd

__all__ = [
    "AttendanceAggregator",
    "CalculationFailure",
    "CalculationResult",
    "ComputationError",
    "FailureKind",
    "LaborCalculationError",
    "LaborCostCalculator",
    "PeriodAggregator",
    "TAX_RATES",
    "ValidationError",
    "WageRateCache",
    "WageRateNotFoundError",
    "WageRateProvider",
    "aggregate_intervals",
    "aggregate_ytd",
    "calculate",
    "cost_from_hours",
    "payment_from_fields",
    "progressive_overtime_cost",
    "rate_for_hour",
    "split_hours",
    "tax_rate_for",
    "validate_payment",
]
