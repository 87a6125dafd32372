"""Attendance log model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from labor_engine.models.base import Base

if TYPE_CHECKING:
    from labor_engine.models.employee import Employee
    from labor_engine.models.site import Site


class AttendanceLog(Base):
    """One check-in / check-out pair at a site.

    check_out_time stays NULL while the employee is still on site.
    """

    __tablename__ = "attendance_logs"

    log_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    site_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("sites.site_id", ondelete="CASCADE"),
        nullable=False,
    )
    check_in_time: Mapped[datetime] = mapped_column(nullable=False)
    check_out_time: Mapped[datetime | None] = mapped_column(nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="present")

    __table_args__ = (
        CheckConstraint(
            "check_out_time IS NULL OR check_out_time > check_in_time",
            name="attendance_logs_checkout_after_checkin",
        ),
        Index("ix_attendance_logs_employee_check_in", "employee_id", "check_in_time"),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="attendance_logs")
    site: Mapped[Site] = relationship(back_populates="attendance_logs")
