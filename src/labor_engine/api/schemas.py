"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from labor_engine.calculators.types import LaborStatus


# ============================================================================
# Labor record schemas
# ============================================================================


class ForLaborCreate(BaseModel):
    """Schema for creating a labor record from explicit payment terms.

    Amount fields are validated per payment type by the calculator, so all
    of them are optional here.
    """

    employee_id: int
    site_id: int
    payment_id: int
    payment_type: str
    payment_date: date | None = None
    for_labor_amount: Decimal | None = None
    hours_worked: Decimal | None = None
    hourly_rate: Decimal | None = None
    overtime_hours: Decimal | None = None
    overtime_rate: Decimal | None = None
    bonus_amount: Decimal | None = None
    description: str | None = None


class ForLaborResponse(BaseModel):
    """Schema for labor record response."""

    model_config = ConfigDict(from_attributes=True)

    for_labor_id: int
    employee_id: int
    site_id: int
    payment_id: int
    payment_type: str
    status: str
    payment_date: date
    for_labor_amount: Decimal
    hours_worked: Decimal | None = None
    hourly_rate: Decimal | None = None
    overtime_hours: Decimal | None = None
    overtime_rate: Decimal | None = None
    base_amount: Decimal | None = None
    overtime_amount: Decimal | None = None
    bonus_amount: Decimal | None = None
    description: str | None = None
    approved_by: int | None = None
    approved_date: date | None = None
    created_at: datetime
    updated_at: datetime


class ForLaborUpdate(BaseModel):
    """Fields a pending labor record may change. Omitted fields are kept."""

    employee_id: int | None = None
    site_id: int | None = None
    payment_id: int | None = None
    payment_type: str | None = None
    payment_date: date | None = None
    for_labor_amount: Decimal | None = None
    hours_worked: Decimal | None = None
    hourly_rate: Decimal | None = None
    overtime_hours: Decimal | None = None
    overtime_rate: Decimal | None = None
    bonus_amount: Decimal | None = None
    description: str | None = None


class ForLaborListResponse(BaseModel):
    """Schema for listing labor records."""

    items: list[ForLaborResponse]
    total: int
    page: int
    page_size: int
    pages: int


class CostBreakdown(BaseModel):
    """Calculated cost for a payment or a worked day."""

    model_config = ConfigDict(from_attributes=True)

    base_cost: Decimal
    overtime_cost: Decimal | None = None
    bonus_amount: Decimal | None = None
    total_cost: Decimal
    tax_amount: Decimal
    net_amount: Decimal


class ForLaborCreatedResponse(BaseModel):
    """Persisted record plus the calculation that produced it."""

    record: ForLaborResponse
    calculation: CostBreakdown


class ForLaborBulkCreatedResponse(BaseModel):
    created: list[ForLaborCreatedResponse]


class AttendanceRecordCreate(BaseModel):
    """Schema for creating a labor record from one day's attendance."""

    employee_id: int
    site_id: int
    payment_id: int
    work_date: date
    progressive: bool = True


class PeriodGenerateRequest(BaseModel):
    """Schema for generating labor records across a date range."""

    employee_id: int
    site_id: int
    payment_id: int
    start_date: date
    end_date: date
    progressive: bool = True


# ============================================================================
# Attendance cost schemas
# ============================================================================


class AttendanceHoursResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_hours: Decimal
    regular_hours: Decimal
    overtime_hours: Decimal
    double_time_hours: Decimal
    interval_count: int


class WageRateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    wage_rate_id: int
    role_id: int
    hourly_rate: Decimal
    effective_date: date


class DailyCostResponse(BaseModel):
    work_date: date
    hours: AttendanceHoursResponse
    calculation: CostBreakdown
    double_time_cost: Decimal


class PeriodCostResponse(BaseModel):
    """Attendance-derived cost across a date range."""

    start_date: date
    end_date: date
    total: CostBreakdown
    days_processed: int
    days_with_cost: int
    daily_breakdown: list[DailyCostResponse]
    skipped_dates: list[date]
    wage_rate: WageRateResponse | None = None


class PeriodGenerateResponse(BaseModel):
    created: list[ForLaborResponse]
    existing_dates: list[date]
    period: PeriodCostResponse


# ============================================================================
# Analytics schemas
# ============================================================================


class YTDSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_hourly: Decimal
    total_monthly: Decimal
    total_bonus: Decimal
    total_overtime: Decimal
    total_commission: Decimal
    grand_total: Decimal
    total_tax: Decimal
    net_total: Decimal
    record_count: int
    unrecognized_count: int


class PaymentTypeBreakdownResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    payment_type: str
    count: int
    total_amount: Decimal
    average_amount: Decimal
    percentage_of_total: Decimal


class PaymentTypeAnalyticsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    breakdown: list[PaymentTypeBreakdownResponse]
    summary: YTDSummaryResponse


class GroupTotalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    count: int
    total_amount: Decimal


class EmployeeLaborSummaryResponse(BaseModel):
    """Labor totals for one employee, split by site."""

    employee_id: int
    employee_name: str
    total_records: int
    total_amount: Decimal
    average_amount: Decimal
    by_site: list[GroupTotalResponse]
    recent_records: list[ForLaborResponse]


class SiteLaborSummaryResponse(BaseModel):
    """Labor totals for one site, split by employee."""

    site_id: int
    site_name: str
    address: str | None = None
    total_records: int
    total_amount: Decimal
    average_amount: Decimal
    unique_employees: int
    by_employee: list[GroupTotalResponse]
    recent_records: list[ForLaborResponse]


class LaborStatisticsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    start_date: date
    end_date: date
    total_records: int
    total_amount: Decimal
    average_amount: Decimal
    top_employees: list[GroupTotalResponse]
    top_sites: list[GroupTotalResponse]


class EmployeeYTDResponse(BaseModel):
    employee_id: int
    employee_name: str
    year: int
    summary: YTDSummaryResponse
    breakdown: list[PaymentTypeBreakdownResponse]


# ============================================================================
# Workflow schemas
# ============================================================================


class StatusTransitionRequest(BaseModel):
    """Schema for moving a labor record to a new status."""

    status: LaborStatus
    approved_by: int | None = None


class WageRateInvalidateRequest(BaseModel):
    employee_id: int | None = None


class WageRateInvalidateResponse(BaseModel):
    invalidated: str
    cached_entries: int = Field(ge=0)


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error response."""

    detail: str
    code: str | None = None
    errors: list[str] | None = None
    context: dict[str, Any] | None = None
