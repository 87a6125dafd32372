"""Labor record status state machine with transition validation."""

from __future__ import annotations

from labor_engine.calculators.types import LaborStatus


class InvalidTransitionError(Exception):
    """Raised when an invalid status transition is attempted."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class RecordLockedError(Exception):
    """Raised when a labor record past review is edited or deleted."""

    def __init__(self, for_labor_id: int, status: str, action: str):
        self.for_labor_id = for_labor_id
        self.status = status
        self.action = action
        super().__init__(
            f"Cannot {action} labor record {for_labor_id} in status '{status}'"
        )


class LaborStatusMachine:
    """State machine for labor record status transitions.

    Allowed transitions:
    - pending → approved
    - pending → cancelled
    - approved → paid
    - approved → cancelled
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        LaborStatus.PENDING: [LaborStatus.APPROVED, LaborStatus.CANCELLED],
        LaborStatus.APPROVED: [LaborStatus.PAID, LaborStatus.CANCELLED],
        LaborStatus.PAID: [],  # Terminal state
        LaborStatus.CANCELLED: [],  # Terminal state
    }

    # Statuses where amounts may still be edited or the record removed
    AMOUNTS_MUTABLE = {LaborStatus.PENDING}

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status)

    @classmethod
    def can_modify_amounts(cls, status: str) -> bool:
        return status in cls.AMOUNTS_MUTABLE

    @classmethod
    def validate_modifiable(cls, for_labor_id: int, status: str, action: str) -> None:
        """Raise RecordLockedError unless the record is still pending."""
        if not cls.can_modify_amounts(status):
            raise RecordLockedError(for_labor_id, status, action)
