"""
Outcome of a data-access operation: exactly one of a value or a failure reason.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "validation"  # caller-supplied data failed a precondition
    STORE = "store"  # connection, constraint or query failure
    NOT_FOUND = "not_found"  # nothing matched the key or filter


class DataServiceError(Exception):
    """Raised by Result.unwrap() for callers that want exceptions instead."""

    def __init__(self, reason: str, kind: ErrorKind = ErrorKind.STORE):
        super().__init__(reason)
        self.reason = reason
        self.kind = kind


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    reason: Optional[str] = None
    kind: Optional[ErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.reason is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, reason: str, kind: ErrorKind = ErrorKind.STORE) -> "Result[T]":
        return cls(reason=reason, kind=kind)

    def unwrap(self) -> Optional[T]:
        if not self.ok:
            raise DataServiceError(self.reason, self.kind)
        return self.value
