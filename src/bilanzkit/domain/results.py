"""Uniform result type returned by the public engine operations."""

from dataclasses import dataclass
from typing import Any, Optional

from bilanzkit.domain.errors import DomainError

INTERNAL_ERROR = "internal"


@dataclass(frozen=True)
class ServiceResult:
    """Outcome of a public operation.

    Operations never raise across their boundary; a failure carries the
    human-readable messages and the error category instead.
    """

    success: bool
    data: Any = None
    errors: tuple[str, ...] = ()
    error_kind: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None) -> "ServiceResult":
        return cls(success=True, data=data)

    @classmethod
    def failure(cls, *messages: str, kind: str = INTERNAL_ERROR) -> "ServiceResult":
        return cls(success=False, errors=tuple(messages), error_kind=kind)

    @classmethod
    def from_error(cls, error: DomainError) -> "ServiceResult":
        return cls.failure(str(error), kind=error.kind)
