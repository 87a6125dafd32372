"""Typed failures for labor cost calculation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class LaborCalculationError(Exception):
    """Base class for labor calculation errors."""


class ValidationError(LaborCalculationError):
    """Raised when calculation input violates one or more rules."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__(f"Validation failed: {', '.join(self.errors)}")


class WageRateNotFoundError(LaborCalculationError):
    """Raised when a calculation requires a wage rate that is not configured."""

    def __init__(self, employee_id: int):
        self.employee_id = employee_id
        super().__init__(f"No wage rate found for employee {employee_id}")


class ComputationError(LaborCalculationError):
    """Raised when aggregation fails unexpectedly.

    The original exception is kept on ``cause`` and chained via ``__cause__``.
    """

    def __init__(self, message: str, cause: BaseException | None = None, context: Any = None):
        self.cause = cause
        self.context = context
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause


class FailureKind(str, Enum):
    """Kinds of expected calculation failure."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class CalculationFailure:
    """An expected failure the caller must branch on."""

    kind: FailureKind
    errors: tuple[str, ...]
    employee_id: int | None = None

    def to_exception(self) -> LaborCalculationError:
        if self.kind == FailureKind.NOT_FOUND and self.employee_id is not None:
            return WageRateNotFoundError(self.employee_id)
        return ValidationError(list(self.errors))


@dataclass
class CalculationResult(Generic[T]):
    """Value or failure returned by calculator entry points."""

    value: T | None = None
    failure: CalculationFailure | None = None

    @property
    def success(self) -> bool:
        return self.failure is None

    @classmethod
    def ok(cls, value: T) -> CalculationResult[T]:
        if value is None:
            raise ValueError("A successful calculation result needs a value")
        return cls(value=value)

    @classmethod
    def invalid(cls, errors: list[str]) -> CalculationResult[T]:
        return cls(failure=CalculationFailure(FailureKind.VALIDATION, tuple(errors)))

    @classmethod
    def wage_rate_missing(cls, employee_id: int) -> CalculationResult[T]:
        return cls(
            failure=CalculationFailure(
                FailureKind.NOT_FOUND,
                (f"No wage rate found for employee {employee_id}",),
                employee_id=employee_id,
            )
        )

    def unwrap(self) -> T:
        """Return the value, raising the typed exception on failure."""
        if self.failure is not None:
            raise self.failure.to_exception()
        if self.value is None:
            raise ComputationError("Calculation result holds neither a value nor a failure")
        return self.value
