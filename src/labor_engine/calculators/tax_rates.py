"""Flat withholding rates per labor payment type."""

from __future__ import annotations

from decimal import Decimal

from labor_engine.calculators.types import PaymentType

TAX_RATES: dict[PaymentType, Decimal] = {
    PaymentType.HOURLY: Decimal("0.15"),
    PaymentType.MONTHLY: Decimal("0.20"),
    PaymentType.BONUS: Decimal("0.25"),
    PaymentType.OVERTIME: Decimal("0.18"),
    PaymentType.COMMISSION: Decimal("0.22"),
}


def tax_rate_for(payment_type: PaymentType | str) -> Decimal | None:
    """Return the withholding rate, or None for unknown payment types."""
    parsed = PaymentType.parse(payment_type)
    if parsed is None:
        return None
    return TAX_RATES[parsed]


def split_tax(total: Decimal, rate: Decimal) -> tuple[Decimal, Decimal]:
    """Split a gross amount into (tax, net) with net = total - tax."""
    tax = total * rate
    return tax, total - tax
