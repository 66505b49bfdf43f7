"""Domain errors raised by the scheduling engine.

Endpoints translate these into HTTP responses; collaborator failures are
caught inside finalization and never reach a caller.
"""
from typing import Iterable, List, Optional


class SchedulingError(Exception):
    """Base class for scheduling engine errors."""


class ValidationError(SchedulingError, ValueError):
    """Poll creation input violates one or more constraints."""

    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid input")


class NotFound(SchedulingError, LookupError):
    """Unknown poll, slot or participant token."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


class InvalidState(SchedulingError):
    """Operation not allowed in the poll's current status."""

    def __init__(self, message: str, status: Optional[str] = None):
        self.status = status
        super().__init__(message)


class CollaboratorFailure(SchedulingError):
    """An outbound booking, calendar or notification call failed."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")
