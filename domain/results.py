"""
Result values returned across the engine boundary.

Failures travel as values tagged with their kind so callers can branch on
``error_kind`` (or on the exception class) instead of catching exceptions.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from domain.entities import InstallmentStatus
from domain.exceptions import EngineError, NotFoundError, ValidationError

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    STORAGE = "storage"
    NOT_FOUND = "not_found"


def error_kind_of(error: Optional[EngineError]) -> Optional[ErrorKind]:
    if error is None:
        return None
    if isinstance(error, ValidationError):
        return ErrorKind.VALIDATION
    if isinstance(error, NotFoundError):
        return ErrorKind.NOT_FOUND
    return ErrorKind.STORAGE


@dataclass
class RetryResult(Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[EngineError] = None
    attempts: int = 0

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        return error_kind_of(self.error)

    @staticmethod
    def ok(data: T, attempts: int) -> 'RetryResult[T]':
        return RetryResult(success=True, data=data, attempts=attempts)

    @staticmethod
    def failed(error: EngineError, attempts: int) -> 'RetryResult[Any]':
        return RetryResult(success=False, error=error, attempts=attempts)


@dataclass(frozen=True)
class RescheduleResult:
    next_pending_id: int
    new_due_iso: str

    def to_dict(self) -> dict:
        return {"nextPendingId": self.next_pending_id, "newDueISO": self.new_due_iso}


@dataclass
class PaymentOutcome:
    installment_id: int
    status: Optional[InstallmentStatus] = None
    rescheduled: Optional[RescheduleResult] = None
    sequencing_violation: bool = False
    error: Optional[EngineError] = None

    @property
    def success(self) -> bool:
        return self.error is None and not self.sequencing_violation

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        return error_kind_of(self.error)


@dataclass
class ScanEntry:
    key: str
    reason: Optional[str] = None
    notification_id: Optional[int] = None


@dataclass
class ScanReport:
    created: list[ScanEntry] = field(default_factory=list)
    skipped: list[ScanEntry] = field(default_factory=list)
    failed: list[ScanEntry] = field(default_factory=list)
    purged: bool = False

    @property
    def created_keys(self) -> list[str]:
        return [entry.key for entry in self.created]


__all__ = [
    "ErrorKind", "error_kind_of", "RetryResult", "RescheduleResult", "PaymentOutcome",
    "ScanEntry", "ScanReport",
]
