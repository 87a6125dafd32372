"""Tests for payment-type labor cost calculation."""

from datetime import date
from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from labor_engine.calculators.errors import (
    CalculationResult,
    ComputationError,
    FailureKind,
    ValidationError,
)
from labor_engine.calculators.labor_cost import (
    calculate,
    cost_from_hours,
    payment_from_fields,
    validate_payment,
)
from labor_engine.calculators.attendance import split_hours
from labor_engine.calculators.tax_rates import TAX_RATES, split_tax, tax_rate_for
from labor_engine.calculators.types import (
    BonusPayment,
    CommissionPayment,
    HourlyPayment,
    MonthlyPayment,
    OvertimePayment,
    PaymentType,
    WageRateInfo,
)

MASON_RATE = WageRateInfo(
    wage_rate_id=1,
    role_id=1,
    hourly_rate=Decimal("18.00"),
    effective_date=date(2024, 1, 1),
)


def wage(rate: str) -> WageRateInfo:
    return WageRateInfo(
        wage_rate_id=1, role_id=1, hourly_rate=Decimal(rate), effective_date=date(2024, 1, 1)
    )


class TestCalculate:
    """Pricing explicit payments."""

    def test_hourly_with_overtime(self):
        cost = calculate(
            HourlyPayment(
                hours_worked=Decimal("8"),
                hourly_rate=Decimal("18"),
                overtime_hours=Decimal("1"),
            )
        ).unwrap()

        assert cost.base_cost == Decimal("144")
        assert cost.overtime_cost == Decimal("27")
        assert cost.total_cost == Decimal("171")
        assert cost.tax_amount == Decimal("25.65")
        assert cost.net_amount == Decimal("145.35")

    def test_hourly_explicit_overtime_rate(self):
        cost = calculate(
            HourlyPayment(
                hours_worked=Decimal("8"),
                hourly_rate=Decimal("20"),
                overtime_hours=Decimal("2"),
                overtime_rate=Decimal("35"),
            )
        ).unwrap()

        assert cost.overtime_cost == Decimal("70")
        assert cost.total_cost == Decimal("230")

    def test_monthly_with_bonus(self):
        cost = calculate(
            MonthlyPayment(amount=Decimal("4000"), bonus_amount=Decimal("500"))
        ).unwrap()

        assert cost.base_cost == Decimal("4000")
        assert cost.bonus_amount == Decimal("500")
        assert cost.total_cost == Decimal("4500")
        assert cost.tax_amount == Decimal("900")

    def test_monthly_without_bonus_reports_zero_bonus(self):
        cost = calculate(MonthlyPayment(amount=Decimal("3000"))).unwrap()
        assert cost.bonus_amount == Decimal("0")
        assert cost.total_cost == Decimal("3000")

    def test_bonus(self):
        cost = calculate(BonusPayment(amount=Decimal("1500"))).unwrap()

        assert cost.base_cost == Decimal("0")
        assert cost.bonus_amount == Decimal("1500")
        assert cost.tax_amount == Decimal("375")
        assert cost.net_amount == Decimal("1125")

    def test_overtime_defaults_to_time_and_a_half(self):
        cost = calculate(
            OvertimePayment(overtime_hours=Decimal("4"), hourly_rate=Decimal("20"))
        ).unwrap()

        assert cost.base_cost == Decimal("0")
        assert cost.overtime_cost == Decimal("120")
        assert cost.tax_amount == Decimal("21.6")

    def test_commission(self):
        cost = calculate(CommissionPayment(amount=Decimal("1000"))).unwrap()
        assert cost.bonus_amount == Decimal("1000")
        assert cost.tax_amount == Decimal("220")

    def test_invalid_payment_returns_failure(self):
        result = calculate(BonusPayment(amount=Decimal("0")))

        assert not result.success
        assert result.failure.kind == FailureKind.VALIDATION
        with pytest.raises(ValidationError) as exc_info:
            result.unwrap()
        assert exc_info.value.errors == ["Amount must be greater than 0"]

    def test_ok_requires_a_value(self):
        with pytest.raises(ValueError):
            CalculationResult.ok(None)

    def test_empty_result_unwrap_raises(self):
        with pytest.raises(ComputationError):
            CalculationResult().unwrap()

    @given(
        amount=st.decimals(min_value=Decimal("0.01"), max_value=Decimal("1000000"), places=2),
        payment_type=st.sampled_from([BonusPayment, CommissionPayment, MonthlyPayment]),
    )
    def test_net_plus_tax_equals_total(self, amount, payment_type):
        cost = calculate(payment_type(amount=amount)).unwrap()
        assert cost.net_amount + cost.tax_amount == cost.total_cost
        assert cost.tax_amount == cost.total_cost * TAX_RATES[payment_type.payment_type]


class TestValidation:
    """Every violated rule is reported."""

    def test_hourly_reports_all_errors(self):
        errors = validate_payment(
            HourlyPayment(
                hours_worked=Decimal("0"),
                hourly_rate=Decimal("0"),
                overtime_hours=Decimal("-1"),
            )
        )

        assert errors == [
            "Hours worked must be greater than 0 for hourly payments",
            "Hourly rate must be greater than 0",
            "Overtime hours cannot be negative",
        ]

    def test_overtime_needs_some_rate(self):
        errors = validate_payment(OvertimePayment(overtime_hours=Decimal("2")))
        assert errors == ["Overtime rate or base hourly rate is required"]

    def test_monthly_negative_bonus(self):
        errors = validate_payment(
            MonthlyPayment(amount=Decimal("100"), bonus_amount=Decimal("-5"))
        )
        assert errors == ["Bonus amount cannot be negative"]

    def test_typed_payment_with_nan_is_invalid(self):
        result = calculate(
            HourlyPayment(
                hours_worked=Decimal("NaN"),
                hourly_rate=Decimal("18"),
                overtime_hours=Decimal("NaN"),
            )
        )

        assert result.failure.errors == (
            "hours_worked must be a finite number",
            "overtime_hours must be a finite number",
            "Hours worked must be greater than 0 for hourly payments",
        )

    def test_infinite_overtime_rate_is_invalid(self):
        errors = validate_payment(
            OvertimePayment(overtime_hours=Decimal("2"), overtime_rate=Decimal("Infinity"))
        )
        assert errors == [
            "overtime_rate must be a finite number",
            "Overtime rate or base hourly rate is required",
        ]


class TestPaymentFromFields:
    """Building typed payments from loose records."""

    def test_missing_type(self):
        result = payment_from_fields({"hours_worked": 8})
        assert result.failure.errors == ("Payment type is required",)

    def test_unknown_type(self):
        result = payment_from_fields({"payment_type": "piecework"})
        assert result.failure.errors == ("Unsupported payment type: piecework",)

    def test_hourly_from_strings(self):
        payment = payment_from_fields(
            {"payment_type": "hourly", "hours_worked": "7.5", "hourly_rate": "22"}
        ).unwrap()

        assert payment == HourlyPayment(hours_worked=Decimal("7.5"), hourly_rate=Decimal("22"))

    def test_bonus_accepts_bonus_amount(self):
        payment = payment_from_fields({"payment_type": "bonus", "bonus_amount": 250}).unwrap()
        assert payment == BonusPayment(amount=Decimal("250"))

    def test_unparseable_number_reported_with_rule_errors(self):
        result = payment_from_fields(
            {"payment_type": "hourly", "hours_worked": "eight", "hourly_rate": 0}
        )

        assert result.failure.errors == (
            "hours_worked must be a number",
            "Hours worked must be greater than 0 for hourly payments",
            "Hourly rate must be greater than 0",
        )

    def test_nan_reported_as_validation_error(self):
        result = payment_from_fields(
            {"payment_type": "hourly", "hours_worked": "NaN", "hourly_rate": "18"}
        )

        assert result.failure.kind == FailureKind.VALIDATION
        assert result.failure.errors == (
            "hours_worked must be a finite number",
            "Hours worked must be greater than 0 for hourly payments",
        )

    def test_infinite_rate_rejected(self):
        result = payment_from_fields(
            {"payment_type": "hourly", "hours_worked": "8", "hourly_rate": "Infinity"}
        )

        assert not result.success
        assert "hourly_rate must be a finite number" in result.failure.errors

    def test_non_finite_unused_field_still_rejected(self):
        result = payment_from_fields(
            {"payment_type": "commission", "for_labor_amount": "250", "bonus_amount": "-Infinity"}
        )
        assert result.failure.errors == ("bonus_amount must be a finite number",)


class TestTaxRates:
    def test_known_rates(self):
        assert tax_rate_for("hourly") == Decimal("0.15")
        assert tax_rate_for(PaymentType.MONTHLY) == Decimal("0.20")

    def test_unknown_rate(self):
        assert tax_rate_for("barter") is None

    def test_split_tax_is_exact(self):
        tax, net = split_tax(Decimal("99.99"), Decimal("0.22"))
        assert tax + net == Decimal("99.99")


class TestCostFromHours:
    """Attendance-derived daily cost."""

    def test_nine_hour_day_non_progressive(self):
        cost = cost_from_hours(split_hours(9 * 60), MASON_RATE, progressive=False)

        assert cost.base_cost == Decimal("144")
        assert cost.overtime_cost == Decimal("27")
        assert cost.total_cost == Decimal("171")
        assert cost.tax_amount == Decimal("25.65")
        assert cost.net_amount == Decimal("145.35")

    def test_fourteen_hour_day_double_time(self):
        cost = cost_from_hours(split_hours(14 * 60), MASON_RATE, progressive=False)

        assert cost.double_time_cost == Decimal("72")
        # 4h at 1.5x plus 2h at 2x
        assert cost.overtime_cost == Decimal("108") + Decimal("72")
        assert cost.total_cost == Decimal("144") + Decimal("180")

    def test_progressive_eleven_hour_day(self):
        cost = cost_from_hours(split_hours(11 * 60), wage("20"), progressive=True)

        assert cost.base_cost == Decimal("160")
        assert cost.overtime_cost == Decimal("96")
        assert cost.total_cost == Decimal("256")

    def test_empty_day_is_zero(self):
        cost = cost_from_hours(split_hours(0), MASON_RATE)

        assert cost.total_cost == 0
        assert cost.tax_amount == 0
        assert cost.attendance_hours.is_empty

    @given(minutes=st.integers(min_value=0, max_value=24 * 60), progressive=st.booleans())
    def test_components_sum_to_total(self, minutes, progressive):
        cost = cost_from_hours(split_hours(minutes), MASON_RATE, progressive=progressive)
        assert cost.base_cost + cost.overtime_cost == cost.total_cost
        assert cost.net_amount + cost.tax_amount == cost.total_cost
