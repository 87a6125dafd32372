"""SQLAlchemy models for site labor data."""

from labor_engine.models.attendance import AttendanceLog
from labor_engine.models.base import Base, TimestampMixin
from labor_engine.models.employee import Employee, Role, WageRate
from labor_engine.models.labor import ForLabor, Payment
from labor_engine.models.site import Site

__all__ = [
    "AttendanceLog",
    "Base",
    "Employee",
    "ForLabor",
    "Payment",
    "Role",
    "Site",
    "TimestampMixin",
    "WageRate",
]
