"""Construction site model."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from labor_engine.models.base import Base

if TYPE_CHECKING:
    from labor_engine.models.attendance import AttendanceLog
    from labor_engine.models.labor import ForLabor, Payment


class Site(Base):
    """Construction site."""

    __tablename__ = "sites"

    site_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    site_name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[str | None] = mapped_column(String, nullable=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    deadline: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="planning")
    money_spent: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('planning', 'active', 'on_hold', 'completed', 'cancelled')",
            name="sites_status_check",
        ),
    )

    # Relationships
    attendance_logs: Mapped[list[AttendanceLog]] = relationship(back_populates="site")
    labor_records: Mapped[list[ForLabor]] = relationship(back_populates="site")
    payments: Mapped[list[Payment]] = relationship(back_populates="site")
