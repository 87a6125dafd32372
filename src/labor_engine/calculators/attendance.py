"""Daily hours worked from attendance check-in / check-out pairs."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, time
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from labor_engine.calculators.errors import ComputationError
from labor_engine.calculators.types import ZERO, AttendanceHours, AttendanceInterval
from labor_engine.models import AttendanceLog

REGULAR_HOURS_LIMIT = Decimal("8")
OVERTIME_HOURS_LIMIT = Decimal("12")
MINUTES_PER_HOUR = Decimal("60")


def interval_minutes(interval: AttendanceInterval) -> int:
    """Whole minutes between check-in and check-out, rounded down."""
    if interval.check_out_time is None:
        return 0
    elapsed = interval.check_out_time - interval.check_in_time
    if elapsed.total_seconds() <= 0:
        raise ComputationError(
            f"Attendance interval {interval.log_id} checks out at "
            f"{interval.check_out_time} before checking in at {interval.check_in_time}",
            context=interval,
        )
    return int(elapsed.total_seconds() // 60)


def split_hours(total_minutes: int, interval_count: int = 0) -> AttendanceHours:
    """Split a day's minutes into regular (<= 8h), overtime (9th-12th h) and double time."""
    total_hours = Decimal(total_minutes) / MINUTES_PER_HOUR
    regular = min(total_hours, REGULAR_HOURS_LIMIT)
    overtime = min(
        max(total_hours - REGULAR_HOURS_LIMIT, ZERO),
        OVERTIME_HOURS_LIMIT - REGULAR_HOURS_LIMIT,
    )
    double_time = max(total_hours - OVERTIME_HOURS_LIMIT, ZERO)
    return AttendanceHours(
        total_hours=total_hours,
        regular_hours=regular,
        overtime_hours=overtime,
        double_time_hours=double_time,
        total_minutes=total_minutes,
        interval_count=interval_count,
    )


def aggregate_intervals(intervals: Iterable[AttendanceInterval]) -> AttendanceHours:
    """Sum completed intervals into one day's hour buckets. Open intervals are ignored."""
    total_minutes = 0
    count = 0
    for interval in intervals:
        if not interval.is_complete:
            continue
        total_minutes += interval_minutes(interval)
        count += 1
    return split_hours(total_minutes, count)


def day_bounds(work_date: date) -> tuple[datetime, datetime]:
    """Inclusive [00:00:00, 23:59:59.999999] window for a calendar day."""
    return datetime.combine(work_date, time.min), datetime.combine(work_date, time.max)


class AttendanceAggregator:
    """Loads a day's completed attendance and computes hours worked."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def compute_daily_hours(
        self,
        employee_id: int,
        work_date: date,
        site_id: int | None = None,
    ) -> AttendanceHours:
        intervals = await self.get_intervals(employee_id, work_date, site_id)
        return aggregate_intervals(intervals)

    async def get_intervals(
        self,
        employee_id: int,
        work_date: date,
        site_id: int | None = None,
    ) -> list[AttendanceInterval]:
        """Completed intervals whose check-in falls on work_date."""
        start_of_day, end_of_day = day_bounds(work_date)
        query = select(AttendanceLog).where(
            AttendanceLog.employee_id == employee_id,
            AttendanceLog.check_in_time >= start_of_day,
            AttendanceLog.check_in_time <= end_of_day,
            AttendanceLog.check_out_time.is_not(None),
        )
        if site_id is not None:
            query = query.where(AttendanceLog.site_id == site_id)
        query = query.order_by(AttendanceLog.check_in_time)

        result = await self.session.execute(query)
        return [
            AttendanceInterval(
                check_in_time=log.check_in_time,
                check_out_time=log.check_out_time,
                log_id=log.log_id,
                site_id=log.site_id,
            )
            for log in result.scalars().all()
        ]
