"""Progressive overtime rates."""

from __future__ import annotations

import math
from decimal import Decimal

from labor_engine.calculators.types import (
    DEFAULT_PROGRESSIVE_CONFIG,
    ZERO,
    ProgressiveOvertimeConfig,
)


def overtime_multiplier(
    hour_index: int,
    config: ProgressiveOvertimeConfig = DEFAULT_PROGRESSIVE_CONFIG,
) -> Decimal:
    """Multiplier for the given absolute hour of the day (1-based).

    Hours up to start_after_hours pay 1x. Hour start_after_hours + 1 pays
    base_multiplier, and each later hour adds increment_per_hour, capped at
    max_multiplier when one is set.
    """
    if hour_index <= config.start_after_hours:
        return Decimal("1")
    step = hour_index - config.start_after_hours
    multiplier = config.base_multiplier + (step - 1) * config.increment_per_hour
    if config.max_multiplier is not None and multiplier > config.max_multiplier:
        multiplier = config.max_multiplier
    return multiplier


def rate_for_hour(
    base_rate: Decimal,
    hour_index: int,
    config: ProgressiveOvertimeConfig = DEFAULT_PROGRESSIVE_CONFIG,
) -> Decimal:
    """Pay rate for one absolute hour of the day."""
    if hour_index <= config.start_after_hours:
        return base_rate
    return base_rate * overtime_multiplier(hour_index, config)


def progressive_overtime_cost(
    base_rate: Decimal,
    overtime_hours: Decimal,
    config: ProgressiveOvertimeConfig = DEFAULT_PROGRESSIVE_CONFIG,
) -> Decimal:
    """Sum of stepped hourly rates across the overtime hours.

    Rounding policy: overtime is charged in whole-hour steps, so a
    fractional final hour (e.g. 2.5h) is paid as a full step at that
    hour's rate (3 steps). This slightly over-pays partial hours.
    """
    if overtime_hours <= 0:
        return ZERO
    steps = math.ceil(overtime_hours)
    return sum(
        (
            rate_for_hour(base_rate, config.start_after_hours + i, config)
            for i in range(1, steps + 1)
        ),
        ZERO,
    )
