"""Explicit success/failure results and the error kinds they carry."""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E")

MALFORMED_PAYLOAD = "malformed payload"
SCHEMA_MISMATCH = "schema mismatch"


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful outcome holding a value."""

    value: T


@dataclass(frozen=True)
class Failure(Generic[E]):
    """Failed outcome holding an error."""

    error: E


Result = Success[T] | Failure[E]


@dataclass(frozen=True)
class ServiceUnavailable:
    """Estimation service is not configured or could not be reached."""

    message: str
    reason: str = "service unavailable"


@dataclass(frozen=True)
class InvalidResponse:
    """Estimation payload failed parsing or schema validation."""

    message: str
    reason: str = SCHEMA_MISMATCH


@dataclass(frozen=True)
class ValidationError:
    """Local validation failure before a commit."""

    message: str
    reason: str = "validation failed"


@dataclass(frozen=True)
class WorkflowBusy:
    """An estimation is already in flight for this workflow."""

    message: str = "An estimate is already in progress."
    reason: str = "busy"


EstimationError = ServiceUnavailable | InvalidResponse
