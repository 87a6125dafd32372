"""Labor engine services."""

from labor_engine.services.labor_service import LaborService, RecordNotFoundError
from labor_engine.services.state_machine import (
    InvalidTransitionError,
    LaborStatusMachine,
    RecordLockedError,
)

__all__ = [
    "InvalidTransitionError",
    "LaborService",
    "LaborStatusMachine",
    "RecordLockedError",
    "RecordNotFoundError",
]
