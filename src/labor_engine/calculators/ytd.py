"""Year-to-date totals from persisted labor records."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from labor_engine.calculators.tax_rates import TAX_RATES
from labor_engine.calculators.types import ZERO, PaymentType, YTDSummary

logger = logging.getLogger(__name__)

_BUCKETS = {
    PaymentType.HOURLY: "total_hourly",
    PaymentType.MONTHLY: "total_monthly",
    PaymentType.BONUS: "total_bonus",
    PaymentType.OVERTIME: "total_overtime",
    PaymentType.COMMISSION: "total_commission",
}


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def aggregate_ytd(records: Iterable[Any]) -> YTDSummary:
    """Bucket labor records by payment type and total their tax and net.

    Records may be ORM rows or mappings with ``payment_type`` and
    ``for_labor_amount``. A missing amount counts as 0. Records with an
    unrecognized payment type join no bucket and are not taxed; they are
    counted in ``unrecognized_count`` so bad data stays visible.
    """
    summary = YTDSummary()
    unrecognized: dict[str, int] = {}

    for record in records:
        summary.record_count += 1
        raw_amount = _field(record, "for_labor_amount")
        amount = Decimal(str(raw_amount)) if raw_amount is not None else ZERO
        raw_type = _field(record, "payment_type")
        payment_type = PaymentType.parse(raw_type)

        if payment_type is None:
            summary.unrecognized_count += 1
            key = str(raw_type)
            unrecognized[key] = unrecognized.get(key, 0) + 1
            continue

        tax = amount * TAX_RATES[payment_type]
        bucket = _BUCKETS[payment_type]
        setattr(summary, bucket, getattr(summary, bucket) + amount)
        summary.total_tax += tax
        summary.net_total += amount - tax

    summary.grand_total = (
        summary.total_hourly
        + summary.total_monthly
        + summary.total_bonus
        + summary.total_overtime
        + summary.total_commission
    )

    if unrecognized:
        logger.warning(
            "Excluded %d labor record(s) with unrecognized payment types: %s",
            summary.unrecognized_count,
            unrecognized,
        )
    return summary
