"""Labor cost engine for construction-site attendance and payroll."""

__version__ = "0.1.0"
