"""Role, wage rate and employee models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from labor_engine.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from labor_engine.models.attendance import AttendanceLog
    from labor_engine.models.labor import ForLabor


class Role(Base):
    """Job role on a site (e.g. mason, electrician, supervisor)."""

    __tablename__ = "roles"

    role_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    role_name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(String, nullable=True)

    # Relationships
    employees: Mapped[list[Employee]] = relationship(back_populates="role")
    wage_rate: Mapped[WageRate | None] = relationship(
        back_populates="role", uselist=False
    )


class WageRate(Base):
    """Hourly wage rate for a role. One row per role."""

    __tablename__ = "wage_rates"

    wage_rate_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    role_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("roles.role_id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    effective_date: Mapped[date] = mapped_column(Date, nullable=False)

    __table_args__ = (
        CheckConstraint("hourly_rate > 0", name="wage_rates_hourly_rate_positive"),
    )

    # Relationships
    role: Mapped[Role] = relationship(back_populates="wage_rate")


class Employee(Base, TimestampMixin):
    """Site employee."""

    __tablename__ = "employees"

    employee_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    phone_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    role_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("roles.role_id", ondelete="RESTRICT"),
        nullable=False,
    )
    date_hired: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'inactive', 'terminated', 'on_leave')",
            name="employees_status_check",
        ),
    )

    # Relationships
    role: Mapped[Role] = relationship(back_populates="employees")
    attendance_logs: Mapped[list[AttendanceLog]] = relationship(back_populates="employee")
    labor_records: Mapped[list[ForLabor]] = relationship(
        back_populates="employee", foreign_keys="ForLabor.employee_id"
    )

    @property
    def full_name(self) -> str:
        """Get full name."""
        return f"{self.first_name} {self.last_name}"

    @property
    def is_active(self) -> bool:
        return self.status == "active"
