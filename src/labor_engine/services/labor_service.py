"""Labor record service - persists calculated payroll line items."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from labor_engine.calculators.errors import ValidationError
from labor_engine.calculators.labor_cost import LaborCostCalculator
from labor_engine.calculators.period import PeriodAggregator
from labor_engine.calculators.types import (
    AttendanceCostCalculation,
    CostCalculation,
    LaborStatus,
    PaymentType,
    PeriodCostCalculation,
    YTDSummary,
)
from labor_engine.calculators.wage_rates import WageRateCache
from labor_engine.calculators.ytd import aggregate_ytd
from labor_engine.models import Employee, ForLabor, Payment, Site
from labor_engine.services.state_machine import LaborStatusMachine

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
RECENT_RECORD_COUNT = 10
TOP_EMPLOYEE_COUNT = 10
STATISTICS_DEFAULT_DAYS = 30

# Payload keys that change how a record is priced
PRICING_FIELDS = (
    "payment_type",
    "hours_worked",
    "hourly_rate",
    "overtime_hours",
    "overtime_rate",
    "for_labor_amount",
    "bonus_amount",
)
EDITABLE_FIELDS = (
    *PRICING_FIELDS,
    "employee_id",
    "site_id",
    "payment_id",
    "payment_date",
    "description",
)


class RecordNotFoundError(Exception):
    """Raised when a referenced employee, site, payment or record is missing."""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with ID {entity_id} not found")


@dataclass
class CreatedLaborRecord:
    record: ForLabor
    cost: CostCalculation


@dataclass
class PeriodGenerationResult:
    created: list[CreatedLaborRecord]
    period: PeriodCostCalculation
    # Days that already had a labor record for this employee and site
    existing_dates: list[date] = field(default_factory=list)


@dataclass
class PaymentTypeBreakdown:
    payment_type: str
    count: int
    total_amount: Decimal
    average_amount: Decimal
    percentage_of_total: Decimal


@dataclass
class PaymentTypeAnalytics:
    breakdown: list[PaymentTypeBreakdown]
    summary: YTDSummary


@dataclass
class EmployeeYTD:
    employee: Employee
    year: int
    summary: YTDSummary
    breakdown: list[PaymentTypeBreakdown]


def _money(value: Decimal | None) -> Decimal | None:
    """Round to cents for storage in a NUMERIC(10, 2) column."""
    if value is None:
        return None
    return value.quantize(CENT)


def _breakdown(records: list[ForLabor]) -> list[PaymentTypeBreakdown]:
    groups: dict[str, tuple[int, Decimal]] = {}
    grand = Decimal("0")
    for record in records:
        amount = Decimal(record.for_labor_amount or 0)
        count, total = groups.get(record.payment_type, (0, Decimal("0")))
        groups[record.payment_type] = (count + 1, total + amount)
        grand += amount

    return [
        PaymentTypeBreakdown(
            payment_type=payment_type,
            count=count,
            total_amount=total,
            average_amount=total / count,
            percentage_of_total=(total / grand * 100) if grand > 0 else Decimal("0"),
        )
        for payment_type, (count, total) in sorted(groups.items())
    ]


@dataclass
class LaborRecordPage:
    items: list[ForLabor]
    total: int
    page: int
    page_size: int

    @property
    def pages(self) -> int:
        return -(-self.total // self.page_size)


@dataclass
class GroupTotal:
    """Record count and amount for one employee or site."""

    id: int
    name: str
    count: int
    total_amount: Decimal


@dataclass
class EmployeeLaborSummary:
    employee: Employee
    total_records: int
    total_amount: Decimal
    average_amount: Decimal
    by_site: list[GroupTotal]
    recent_records: list[ForLabor]


@dataclass
class SiteLaborSummary:
    site: Site
    total_records: int
    total_amount: Decimal
    average_amount: Decimal
    by_employee: list[GroupTotal]
    recent_records: list[ForLabor]

    @property
    def unique_employees(self) -> int:
        return len(self.by_employee)


@dataclass
class LaborStatistics:
    start_date: date
    end_date: date
    total_records: int
    total_amount: Decimal
    average_amount: Decimal
    top_employees: list[GroupTotal]
    top_sites: list[GroupTotal]


def _date_filters(start_date: date | None, end_date: date | None) -> list[Any]:
    filters = []
    if start_date is not None:
        filters.append(ForLabor.payment_date >= start_date)
    if end_date is not None:
        filters.append(ForLabor.payment_date <= end_date)
    return filters


def _average(total: Decimal, count: int) -> Decimal:
    return total / count if count else Decimal("0")


def _repriced_terms(record: ForLabor, changes: Mapping[str, Any]) -> dict[str, Any]:
    """Current pricing terms of a record with the requested changes applied.

    Hourly and overtime records derive their amount from hours and rates, so
    the stored amount is dropped unless the caller sets one. A bonus given
    only as bonus_amount replaces the stored amount.
    """
    terms = {name: getattr(record, name) for name in PRICING_FIELDS}
    terms.update({k: v for k, v in changes.items() if k in PRICING_FIELDS})
    if "for_labor_amount" not in changes:
        payment_type = PaymentType.parse(terms["payment_type"])
        if payment_type in (PaymentType.HOURLY, PaymentType.OVERTIME):
            terms["for_labor_amount"] = None
        elif payment_type == PaymentType.BONUS and "bonus_amount" in changes:
            terms["for_labor_amount"] = None
    return terms


class LaborService:
    """Service for labor payroll records.

    Operations:
    - create_record: price an explicit payment and persist it
    - create_from_attendance: price one attendance day and persist it
    - generate_period_records: one record per worked day in a range
    - attendance_cost_preview: price a range without persisting
    - list_records / employee_summary / site_summary / labor_statistics
    - payment_type_analytics / employee_ytd_summary: reporting rollups
    - update_record / delete_record: edits while a record is pending
    - transition_status: approval / payment workflow
    """

    def __init__(
        self,
        session: AsyncSession,
        cache: WageRateCache | None = None,
        timeout_seconds: float | None = None,
    ):
        self.session = session
        self.calculator = LaborCostCalculator(session, cache)
        self.periods = PeriodAggregator(self.calculator, timeout_seconds=timeout_seconds)

    # ===== Lookups =====

    async def get_record(self, for_labor_id: int) -> ForLabor:
        record = await self.session.get(ForLabor, for_labor_id)
        if record is None:
            raise RecordNotFoundError("Labor record", for_labor_id)
        return record

    async def _require_active_employee(self, employee_id: int) -> Employee:
        employee = await self.session.get(Employee, employee_id)
        if employee is None:
            raise RecordNotFoundError("Employee", employee_id)
        if not employee.is_active:
            raise ValidationError(["Cannot create labor record for inactive employee"])
        return employee

    async def _require_site_and_payment(self, site_id: int, payment_id: int) -> None:
        if await self.session.get(Site, site_id) is None:
            raise RecordNotFoundError("Site", site_id)
        if await self.session.get(Payment, payment_id) is None:
            raise RecordNotFoundError("Payment", payment_id)

    # ===== Creation =====

    async def create_record(self, payload: Mapping[str, Any]) -> CreatedLaborRecord:
        """Validate, price and persist an explicit labor payment.

        for_labor_amount defaults to the calculated total when not supplied.
        New records always start pending.
        """
        cost = self.calculator.calculate_fields(payload).unwrap()

        employee_id = payload["employee_id"]
        await self._require_active_employee(employee_id)
        await self._require_site_and_payment(payload["site_id"], payload["payment_id"])

        supplied_amount = payload.get("for_labor_amount")
        record = ForLabor(
            employee_id=employee_id,
            site_id=payload["site_id"],
            payment_id=payload["payment_id"],
            payment_type=PaymentType(payload["payment_type"]).value,
            status=LaborStatus.PENDING.value,
            payment_date=payload.get("payment_date") or date.today(),
            for_labor_amount=_money(
                Decimal(str(supplied_amount)) if supplied_amount else cost.total_cost
            ),
            hours_worked=payload.get("hours_worked"),
            hourly_rate=payload.get("hourly_rate"),
            overtime_hours=payload.get("overtime_hours"),
            overtime_rate=payload.get("overtime_rate"),
            base_amount=_money(cost.base_cost),
            overtime_amount=_money(cost.overtime_cost),
            bonus_amount=_money(cost.bonus_amount),
            description=payload.get("description"),
        )
        self.session.add(record)
        await self.session.flush()
        logger.info(
            "Created %s labor record %s for employee %s: %s",
            record.payment_type,
            record.for_labor_id,
            employee_id,
            record.for_labor_amount,
        )
        return CreatedLaborRecord(record=record, cost=cost)

    async def create_records(
        self, payloads: list[Mapping[str, Any]]
    ) -> list[CreatedLaborRecord]:
        """Create several records in order, stopping at the first failure.

        Nothing is committed here; the caller commits all of them or none.
        """
        return [await self.create_record(payload) for payload in payloads]

    def _record_from_day(
        self,
        employee_id: int,
        site_id: int,
        payment_id: int,
        work_date: date,
        cost: AttendanceCostCalculation,
    ) -> ForLabor:
        hours = cost.attendance_hours
        return ForLabor(
            employee_id=employee_id,
            site_id=site_id,
            payment_id=payment_id,
            payment_type=PaymentType.HOURLY.value,
            status=LaborStatus.PENDING.value,
            payment_date=work_date,
            for_labor_amount=_money(cost.total_cost),
            hours_worked=_money(hours.total_hours),
            overtime_hours=_money(hours.overtime_hours + hours.double_time_hours),
            hourly_rate=cost.wage_info.hourly_rate if cost.wage_info else None,
            base_amount=_money(cost.base_cost),
            overtime_amount=_money(cost.overtime_cost),
        )

    async def create_from_attendance(
        self,
        employee_id: int,
        work_date: date,
        site_id: int,
        payment_id: int,
        progressive: bool = True,
    ) -> CreatedLaborRecord:
        """Persist an hourly labor record priced from one day's attendance."""
        cost = (
            await self.calculator.calculate_from_attendance(
                employee_id, work_date, site_id, progressive
            )
        ).unwrap()
        if cost.total_cost <= 0:
            raise ValidationError(["No attendance data found for the specified date"])

        await self._require_active_employee(employee_id)
        await self._require_site_and_payment(site_id, payment_id)

        record = self._record_from_day(employee_id, site_id, payment_id, work_date, cost)
        self.session.add(record)
        await self.session.flush()
        return CreatedLaborRecord(record=record, cost=cost)

    async def generate_period_records(
        self,
        employee_id: int,
        start_date: date,
        end_date: date,
        site_id: int,
        payment_id: int,
        progressive: bool = True,
    ) -> PeriodGenerationResult:
        """Create one hourly record per worked day, skipping days already recorded."""
        await self._require_active_employee(employee_id)
        await self._require_site_and_payment(site_id, payment_id)

        period = (
            await self.periods.calculate_for_period(
                employee_id, start_date, end_date, site_id, progressive
            )
        ).unwrap()

        result = await self.session.execute(
            select(ForLabor.payment_date).where(
                ForLabor.employee_id == employee_id,
                ForLabor.site_id == site_id,
                ForLabor.payment_date >= start_date,
                ForLabor.payment_date <= end_date,
            )
        )
        already_recorded = set(result.scalars().all())

        generated = PeriodGenerationResult(created=[], period=period)
        for day in period.daily_breakdown:
            if day.work_date in already_recorded:
                generated.existing_dates.append(day.work_date)
                continue
            record = self._record_from_day(
                employee_id, site_id, payment_id, day.work_date, day.cost
            )
            self.session.add(record)
            generated.created.append(CreatedLaborRecord(record=record, cost=day.cost))

        await self.session.flush()
        logger.info(
            "Generated %d labor record(s) for employee %s from %s to %s (%d already recorded)",
            len(generated.created),
            employee_id,
            start_date,
            end_date,
            len(generated.existing_dates),
        )
        return generated

    async def attendance_cost_preview(
        self,
        employee_id: int,
        start_date: date,
        end_date: date,
        site_id: int | None = None,
        progressive: bool = True,
    ) -> PeriodCostCalculation:
        return (
            await self.periods.calculate_for_period(
                employee_id, start_date, end_date, site_id, progressive
            )
        ).unwrap()

    # ===== Listing =====

    async def list_records(
        self,
        *,
        employee_id: int | None = None,
        site_id: int | None = None,
        payment_id: int | None = None,
        payment_type: str | None = None,
        status: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> LaborRecordPage:
        """Newest records first, optionally filtered."""
        query = select(ForLabor).where(*_date_filters(start_date, end_date))
        if employee_id is not None:
            query = query.where(ForLabor.employee_id == employee_id)
        if site_id is not None:
            query = query.where(ForLabor.site_id == site_id)
        if payment_id is not None:
            query = query.where(ForLabor.payment_id == payment_id)
        if payment_type:
            query = query.where(ForLabor.payment_type == payment_type)
        if status:
            query = query.where(ForLabor.status == status)

        count_query = select(func.count()).select_from(query.subquery())
        total = await self.session.scalar(count_query) or 0

        query = query.order_by(ForLabor.payment_date.desc(), ForLabor.for_labor_id.desc())
        query = query.offset((page - 1) * page_size).limit(page_size)
        result = await self.session.execute(query)

        return LaborRecordPage(
            items=list(result.scalars().all()),
            total=total,
            page=page,
            page_size=page_size,
        )

    async def _totals(self, filters: list[Any]) -> tuple[int, Decimal]:
        row = (
            await self.session.execute(
                select(
                    func.count(ForLabor.for_labor_id),
                    func.sum(ForLabor.for_labor_amount),
                ).where(*filters)
            )
        ).one()
        return row[0], row[1] or Decimal("0")

    async def _recent(self, filters: list[Any]) -> list[ForLabor]:
        result = await self.session.execute(
            select(ForLabor)
            .where(*filters)
            .order_by(ForLabor.payment_date.desc(), ForLabor.for_labor_id.desc())
            .limit(RECENT_RECORD_COUNT)
        )
        return list(result.scalars().all())

    async def _totals_by_site(self, filters: list[Any]) -> list[GroupTotal]:
        amount = func.sum(ForLabor.for_labor_amount)
        result = await self.session.execute(
            select(Site.site_id, Site.site_name, func.count(ForLabor.for_labor_id), amount)
            .select_from(ForLabor)
            .join(Site, Site.site_id == ForLabor.site_id)
            .where(*filters)
            .group_by(Site.site_id, Site.site_name)
            .order_by(amount.desc(), Site.site_id)
        )
        return [
            GroupTotal(id=site_id, name=name, count=count, total_amount=total or Decimal("0"))
            for site_id, name, count, total in result.all()
        ]

    async def _totals_by_employee(
        self, filters: list[Any], limit: int | None = None
    ) -> list[GroupTotal]:
        amount = func.sum(ForLabor.for_labor_amount)
        query = (
            select(
                Employee.employee_id,
                Employee.first_name,
                Employee.last_name,
                func.count(ForLabor.for_labor_id),
                amount,
            )
            .select_from(ForLabor)
            .join(Employee, Employee.employee_id == ForLabor.employee_id)
            .where(*filters)
            .group_by(Employee.employee_id, Employee.first_name, Employee.last_name)
            .order_by(amount.desc(), Employee.employee_id)
        )
        if limit is not None:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return [
            GroupTotal(
                id=employee_id,
                name=f"{first_name} {last_name}",
                count=count,
                total_amount=total or Decimal("0"),
            )
            for employee_id, first_name, last_name, count, total in result.all()
        ]

    async def employee_summary(
        self,
        employee_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> EmployeeLaborSummary:
        """Totals for one employee, split by site, with the latest records."""
        employee = await self.session.get(Employee, employee_id)
        if employee is None:
            raise RecordNotFoundError("Employee", employee_id)

        filters = [ForLabor.employee_id == employee_id, *_date_filters(start_date, end_date)]
        count, total = await self._totals(filters)
        return EmployeeLaborSummary(
            employee=employee,
            total_records=count,
            total_amount=total,
            average_amount=_average(total, count),
            by_site=await self._totals_by_site(filters),
            recent_records=await self._recent(filters),
        )

    async def site_summary(
        self,
        site_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> SiteLaborSummary:
        """Totals for one site, split by employee, with the latest records."""
        site = await self.session.get(Site, site_id)
        if site is None:
            raise RecordNotFoundError("Site", site_id)

        filters = [ForLabor.site_id == site_id, *_date_filters(start_date, end_date)]
        count, total = await self._totals(filters)
        return SiteLaborSummary(
            site=site,
            total_records=count,
            total_amount=total,
            average_amount=_average(total, count),
            by_employee=await self._totals_by_employee(filters),
            recent_records=await self._recent(filters),
        )

    async def labor_statistics(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> LaborStatistics:
        """Overview of labor spend; defaults to the last 30 days."""
        end_date = end_date or date.today()
        start_date = start_date or end_date - timedelta(days=STATISTICS_DEFAULT_DAYS)

        filters = _date_filters(start_date, end_date)
        count, total = await self._totals(filters)
        return LaborStatistics(
            start_date=start_date,
            end_date=end_date,
            total_records=count,
            total_amount=total,
            average_amount=_average(total, count),
            top_employees=await self._totals_by_employee(filters, limit=TOP_EMPLOYEE_COUNT),
            top_sites=await self._totals_by_site(filters),
        )

    # ===== Reporting =====

    async def payment_type_analytics(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> PaymentTypeAnalytics:
        query = select(ForLabor).where(*_date_filters(start_date, end_date))
        records = list((await self.session.execute(query)).scalars().all())

        return PaymentTypeAnalytics(
            breakdown=_breakdown(records),
            summary=aggregate_ytd(records),
        )

    async def employee_ytd_summary(self, employee_id: int, year: int | None = None) -> EmployeeYTD:
        employee = await self.session.get(Employee, employee_id)
        if employee is None:
            raise RecordNotFoundError("Employee", employee_id)

        year = year or date.today().year
        result = await self.session.execute(
            select(ForLabor).where(
                ForLabor.employee_id == employee_id,
                ForLabor.payment_date >= date(year, 1, 1),
                ForLabor.payment_date <= date(year, 12, 31),
            )
        )
        records = list(result.scalars().all())
        return EmployeeYTD(
            employee=employee,
            year=year,
            summary=aggregate_ytd(records),
            breakdown=_breakdown(records),
        )

    # ===== Workflow =====

    async def transition_status(
        self,
        for_labor_id: int,
        to_status: str,
        approved_by: int | None = None,
    ) -> ForLabor:
        """Move a labor record along pending → approved → paid (or cancelled).

        Raises InvalidTransitionError if the transition is not allowed.
        """
        record = await self.get_record(for_labor_id)
        LaborStatusMachine.validate_transition(record.status, to_status)

        if to_status == LaborStatus.APPROVED:
            record.approved_by = approved_by
            record.approved_date = date.today()

        record.status = LaborStatus(to_status).value
        await self.session.flush()
        return record

    async def update_record(self, for_labor_id: int, changes: Mapping[str, Any]) -> ForLabor:
        """Edit a pending record, repricing it when its payment terms change.

        Status is not editable here; use transition_status.
        Raises RecordLockedError once the record has left pending.
        """
        record = await self.get_record(for_labor_id)
        LaborStatusMachine.validate_modifiable(for_labor_id, record.status, "update")

        changes = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
        missing = [
            name
            for name in ("payment_type", "employee_id", "site_id", "payment_id", "payment_date")
            if name in changes and changes[name] is None
        ]
        if missing:
            raise ValidationError([f"{name} cannot be empty" for name in missing])

        terms = cost = None
        if any(name in changes for name in PRICING_FIELDS):
            terms = _repriced_terms(record, changes)
            cost = self.calculator.calculate_fields(terms).unwrap()

        if changes.get("employee_id", record.employee_id) != record.employee_id:
            await self._require_active_employee(changes["employee_id"])
        if changes.get("site_id", record.site_id) != record.site_id:
            if await self.session.get(Site, changes["site_id"]) is None:
                raise RecordNotFoundError("Site", changes["site_id"])
        if changes.get("payment_id", record.payment_id) != record.payment_id:
            if await self.session.get(Payment, changes["payment_id"]) is None:
                raise RecordNotFoundError("Payment", changes["payment_id"])

        for name in ("employee_id", "site_id", "payment_id", "payment_date", "description"):
            if name in changes:
                setattr(record, name, changes[name])
        if cost is not None:
            supplied_amount = terms["for_labor_amount"]
            record.payment_type = PaymentType(terms["payment_type"]).value
            for name in ("hours_worked", "hourly_rate", "overtime_hours", "overtime_rate"):
                setattr(record, name, terms[name])
            record.for_labor_amount = _money(
                Decimal(str(supplied_amount)) if supplied_amount else cost.total_cost
            )
            record.base_amount = _money(cost.base_cost)
            record.overtime_amount = _money(cost.overtime_cost)
            record.bonus_amount = _money(cost.bonus_amount)

        await self.session.flush()
        logger.info("Updated labor record %s: %s", for_labor_id, sorted(changes))
        return record

    async def delete_record(self, for_labor_id: int) -> None:
        """Remove a pending record. Raises RecordLockedError otherwise."""
        record = await self.get_record(for_labor_id)
        LaborStatusMachine.validate_modifiable(for_labor_id, record.status, "delete")
        await self.session.delete(record)
        await self.session.flush()
        logger.info("Deleted labor record %s", for_labor_id)

    def invalidate_wage_rates(self, employee_id: int | None = None) -> None:
        self.calculator.wage_rates.invalidate(employee_id)
