"""Labor record API endpoints."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Path, Query, Response, status

from labor_engine.api.dependencies import DbSession, Labor, WageCache
from labor_engine.api.schemas import (
    AttendanceHoursResponse,
    AttendanceRecordCreate,
    CostBreakdown,
    DailyCostResponse,
    EmployeeLaborSummaryResponse,
    EmployeeYTDResponse,
    ErrorResponse,
    ForLaborBulkCreatedResponse,
    ForLaborCreate,
    ForLaborCreatedResponse,
    ForLaborListResponse,
    ForLaborResponse,
    ForLaborUpdate,
    GroupTotalResponse,
    LaborStatisticsResponse,
    PaymentTypeAnalyticsResponse,
    PaymentTypeBreakdownResponse,
    PeriodCostResponse,
    PeriodGenerateRequest,
    PeriodGenerateResponse,
    SiteLaborSummaryResponse,
    StatusTransitionRequest,
    WageRateInvalidateRequest,
    WageRateInvalidateResponse,
    WageRateResponse,
    YTDSummaryResponse,
)
from labor_engine.calculators.types import LaborStatus, PeriodCostCalculation
from labor_engine.services.labor_service import CreatedLaborRecord

router = APIRouter(prefix="/for-labor", tags=["for-labor"])


def _created(created: CreatedLaborRecord) -> ForLaborCreatedResponse:
    return ForLaborCreatedResponse(
        record=ForLaborResponse.model_validate(created.record),
        calculation=CostBreakdown.model_validate(created.cost),
    )


def _period(period: PeriodCostCalculation) -> PeriodCostResponse:
    return PeriodCostResponse(
        start_date=period.start_date,
        end_date=period.end_date,
        total=CostBreakdown.model_validate(period.total),
        days_processed=period.days_processed,
        days_with_cost=period.days_with_cost,
        daily_breakdown=[
            DailyCostResponse(
                work_date=day.work_date,
                hours=AttendanceHoursResponse.model_validate(day.cost.attendance_hours),
                calculation=CostBreakdown.model_validate(day.cost),
                double_time_cost=day.cost.double_time_cost,
            )
            for day in period.daily_breakdown
        ],
        skipped_dates=period.skipped_dates,
        wage_rate=(
            WageRateResponse.model_validate(period.wage_info) if period.wage_info else None
        ),
    )


# ============================================================================
# Labor record creation
# ============================================================================


@router.post(
    "",
    response_model=ForLaborCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_labor_record(
    db: DbSession,
    labor: Labor,
    payload: ForLaborCreate,
) -> ForLaborCreatedResponse:
    """Create a labor record, pricing it from its payment terms."""
    created = await labor.create_record(payload.model_dump())
    await db.commit()
    return _created(created)


@router.post(
    "/bulk",
    response_model=ForLaborBulkCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_labor_records(
    db: DbSession,
    labor: Labor,
    payload: list[ForLaborCreate],
) -> ForLaborBulkCreatedResponse:
    """Create several labor records; if any fails, none are saved."""
    created = await labor.create_records([item.model_dump() for item in payload])
    await db.commit()
    return ForLaborBulkCreatedResponse(created=[_created(c) for c in created])


@router.get(
    "",
    response_model=ForLaborListResponse,
)
async def list_labor_records(
    labor: Labor,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 20,
    employee_id: int | None = None,
    site_id: int | None = None,
    payment_id: int | None = None,
    payment_type: str | None = None,
    status_filter: Annotated[LaborStatus | None, Query(alias="status")] = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> ForLaborListResponse:
    """List labor records, newest first, with optional filters."""
    listing = await labor.list_records(
        employee_id=employee_id,
        site_id=site_id,
        payment_id=payment_id,
        payment_type=payment_type,
        status=status_filter.value if status_filter else None,
        start_date=start_date,
        end_date=end_date,
        page=page,
        page_size=page_size,
    )
    return ForLaborListResponse(
        items=[ForLaborResponse.model_validate(r) for r in listing.items],
        total=listing.total,
        page=listing.page,
        page_size=listing.page_size,
        pages=listing.pages,
    )


@router.post(
    "/from-attendance",
    response_model=ForLaborCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_from_attendance(
    db: DbSession,
    labor: Labor,
    payload: AttendanceRecordCreate,
) -> ForLaborCreatedResponse:
    """Create an hourly labor record from one day's attendance logs."""
    created = await labor.create_from_attendance(
        payload.employee_id,
        payload.work_date,
        site_id=payload.site_id,
        payment_id=payload.payment_id,
        progressive=payload.progressive,
    )
    await db.commit()
    return _created(created)


@router.post(
    "/generate-period",
    response_model=PeriodGenerateResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def generate_period_records(
    db: DbSession,
    labor: Labor,
    payload: PeriodGenerateRequest,
) -> PeriodGenerateResponse:
    """Create one labor record per worked day in a date range."""
    generated = await labor.generate_period_records(
        payload.employee_id,
        payload.start_date,
        payload.end_date,
        site_id=payload.site_id,
        payment_id=payload.payment_id,
        progressive=payload.progressive,
    )
    await db.commit()
    return PeriodGenerateResponse(
        created=[ForLaborResponse.model_validate(c.record) for c in generated.created],
        existing_dates=generated.existing_dates,
        period=_period(generated.period),
    )


# ============================================================================
# Attendance cost preview
# ============================================================================


@router.get(
    "/attendance-preview",
    response_model=PeriodCostResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def attendance_cost_preview(
    labor: Labor,
    employee_id: int,
    start_date: date,
    end_date: date,
    site_id: int | None = None,
    progressive: bool = True,
) -> PeriodCostResponse:
    """Price attendance over a date range without creating records."""
    period = await labor.attendance_cost_preview(
        employee_id, start_date, end_date, site_id=site_id, progressive=progressive
    )
    return _period(period)


# ============================================================================
# Analytics
# ============================================================================


@router.get(
    "/employee/{employee_id}/summary",
    response_model=EmployeeLaborSummaryResponse,
    responses={404: {"model": ErrorResponse}},
)
async def employee_labor_summary(
    labor: Labor,
    employee_id: Annotated[int, Path()],
    start_date: date | None = None,
    end_date: date | None = None,
) -> EmployeeLaborSummaryResponse:
    """Labor totals for one employee, split by site."""
    summary = await labor.employee_summary(employee_id, start_date, end_date)
    return EmployeeLaborSummaryResponse(
        employee_id=summary.employee.employee_id,
        employee_name=summary.employee.full_name,
        total_records=summary.total_records,
        total_amount=summary.total_amount,
        average_amount=summary.average_amount,
        by_site=[GroupTotalResponse.model_validate(g) for g in summary.by_site],
        recent_records=[ForLaborResponse.model_validate(r) for r in summary.recent_records],
    )


@router.get(
    "/site/{site_id}/summary",
    response_model=SiteLaborSummaryResponse,
    responses={404: {"model": ErrorResponse}},
)
async def site_labor_summary(
    labor: Labor,
    site_id: Annotated[int, Path()],
    start_date: date | None = None,
    end_date: date | None = None,
) -> SiteLaborSummaryResponse:
    """Labor totals for one site, split by employee."""
    summary = await labor.site_summary(site_id, start_date, end_date)
    return SiteLaborSummaryResponse(
        site_id=summary.site.site_id,
        site_name=summary.site.site_name,
        address=summary.site.address,
        total_records=summary.total_records,
        total_amount=summary.total_amount,
        average_amount=summary.average_amount,
        unique_employees=summary.unique_employees,
        by_employee=[GroupTotalResponse.model_validate(g) for g in summary.by_employee],
        recent_records=[ForLaborResponse.model_validate(r) for r in summary.recent_records],
    )


@router.get(
    "/statistics/overview",
    response_model=LaborStatisticsResponse,
)
async def labor_statistics(
    labor: Labor,
    start_date: date | None = None,
    end_date: date | None = None,
) -> LaborStatisticsResponse:
    """Labor spend overview with top employees and sites (default: last 30 days)."""
    statistics = await labor.labor_statistics(start_date, end_date)
    return LaborStatisticsResponse.model_validate(statistics)


@router.get(
    "/analytics/payment-types",
    response_model=PaymentTypeAnalyticsResponse,
)
async def payment_type_analytics(
    labor: Labor,
    start_date: Annotated[date | None, Query()] = None,
    end_date: Annotated[date | None, Query()] = None,
) -> PaymentTypeAnalyticsResponse:
    """Totals and shares per payment type."""
    analytics = await labor.payment_type_analytics(start_date, end_date)
    return PaymentTypeAnalyticsResponse.model_validate(analytics)


@router.get(
    "/analytics/employee/{employee_id}/ytd",
    response_model=EmployeeYTDResponse,
    responses={404: {"model": ErrorResponse}},
)
async def employee_ytd_summary(
    labor: Labor,
    employee_id: Annotated[int, Path()],
    year: Annotated[int | None, Query(ge=1900, le=9999)] = None,
) -> EmployeeYTDResponse:
    """Year-to-date totals by payment type for one employee."""
    ytd = await labor.employee_ytd_summary(employee_id, year)
    return EmployeeYTDResponse(
        employee_id=ytd.employee.employee_id,
        employee_name=ytd.employee.full_name,
        year=ytd.year,
        summary=YTDSummaryResponse.model_validate(ytd.summary),
        breakdown=[PaymentTypeBreakdownResponse.model_validate(b) for b in ytd.breakdown],
    )


# ============================================================================
# Wage rate cache
# ============================================================================


@router.post(
    "/wage-rates/invalidate",
    response_model=WageRateInvalidateResponse,
)
async def invalidate_wage_rates(
    labor: Labor,
    cache: WageCache,
    payload: WageRateInvalidateRequest,
) -> WageRateInvalidateResponse:
    """Drop cached wage rates after a rate or role change."""
    labor.invalidate_wage_rates(payload.employee_id)
    return WageRateInvalidateResponse(
        invalidated="all" if payload.employee_id is None else str(payload.employee_id),
        cached_entries=len(cache),
    )


# ============================================================================
# Single record and workflow
# ============================================================================


@router.get(
    "/{for_labor_id}",
    response_model=ForLaborResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_labor_record(
    labor: Labor,
    for_labor_id: Annotated[int, Path()],
) -> ForLaborResponse:
    """Get a labor record by ID."""
    record = await labor.get_record(for_labor_id)
    return ForLaborResponse.model_validate(record)


@router.post(
    "/{for_labor_id}/status",
    response_model=ForLaborResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def transition_labor_status(
    db: DbSession,
    labor: Labor,
    for_labor_id: Annotated[int, Path()],
    payload: StatusTransitionRequest,
) -> ForLaborResponse:
    """Approve, pay or cancel a labor record."""
    record = await labor.transition_status(
        for_labor_id, payload.status.value, approved_by=payload.approved_by
    )
    await db.commit()
    return ForLaborResponse.model_validate(record)


@router.patch(
    "/{for_labor_id}",
    response_model=ForLaborResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def update_labor_record(
    db: DbSession,
    labor: Labor,
    for_labor_id: Annotated[int, Path()],
    payload: ForLaborUpdate,
) -> ForLaborResponse:
    """Edit a pending labor record; changed payment terms are repriced."""
    record = await labor.update_record(for_labor_id, payload.model_dump(exclude_unset=True))
    await db.commit()
    return ForLaborResponse.model_validate(record)


@router.delete(
    "/{for_labor_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_labor_record(
    db: DbSession,
    labor: Labor,
    for_labor_id: Annotated[int, Path()],
) -> None:
    """Delete a pending labor record."""
    await labor.delete_record(for_labor_id)
    await db.commit()
