"""Payment and labor payroll record models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from labor_engine.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from labor_engine.models.employee import Employee
    from labor_engine.models.site import Site


class Payment(Base):
    """Site payment that labor records are booked against."""

    __tablename__ = "payments"

    payment_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    site_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("sites.site_id", ondelete="CASCADE"),
        nullable=False,
    )
    payment_date: Mapped[date] = mapped_column(
        Date, nullable=False, server_default=func.current_date()
    )

    # Relationships
    site: Mapped[Site] = relationship(back_populates="payments")
    labor_records: Mapped[list[ForLabor]] = relationship(back_populates="payment")


class ForLabor(Base, TimestampMixin):
    """One payroll line item for an employee at a site.

    payment_type is intentionally unconstrained at the database level:
    rows imported from older systems may carry types the engine does not
    price, and aggregation reports them separately instead of failing.
    """

    __tablename__ = "for_labor"

    for_labor_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    payment_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("payments.payment_id", ondelete="RESTRICT"),
        nullable=False,
    )
    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id", ondelete="RESTRICT"),
        nullable=False,
    )
    site_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("sites.site_id", ondelete="RESTRICT"),
        nullable=False,
    )
    for_labor_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")

    # Labor tracking
    hours_worked: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    overtime_hours: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    overtime_rate: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)

    # Cost breakdown
    base_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    overtime_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    bonus_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    approved_by: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id", ondelete="SET NULL"),
        nullable=True,
    )
    approved_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'paid', 'cancelled')",
            name="for_labor_status_check",
        ),
        Index("idx_for_labor_payment_id_cover", "payment_id", "for_labor_amount"),
        Index("ix_for_labor_employee_date", "employee_id", "payment_date"),
    )

    # Fetch server-side timestamps on flush
    __mapper_args__ = {"eager_defaults": True}

    # Relationships
    employee: Mapped[Employee] = relationship(
        back_populates="labor_records", foreign_keys=[employee_id]
    )
    site: Mapped[Site] = relationship(back_populates="labor_records")
    payment: Mapped[Payment] = relationship(back_populates="labor_records")
