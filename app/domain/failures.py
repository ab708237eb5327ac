"""
app/domain/failures.py

Failure taxonomy and stage result type for the import pipeline.

Every pipeline stage returns a ``StageResult`` so callers can branch on
``failure.code`` instead of catching exception subclasses. ``unwrap()`` is
available for callers that prefer an exception.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from app.domain.measurement import ImportResult

T = TypeVar("T")


class FailureCode(str, Enum):
    INVALID_FILE = "invalid_file"
    INVALID_FORMAT = "invalid_format"
    EMPTY_INPUT = "empty_input"
    TRANSFORM_ERROR = "transform_error"
    VALIDATION_BLOCKED = "validation_blocked"
    PERSISTENCE_FAILURE = "persistence_failure"


@dataclass(frozen=True)
class ImportFailure:
    """
    Structured description of why a stage could not complete.
    """

    code: FailureCode
    message: str
    row_index: int | None = None
    details: dict[str, Any] = field(default_factory=dict)
    partial_result: ImportResult | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
            "row_index": self.row_index,
            "details": self.details,
        }
        if self.partial_result is not None:
            payload["success_count"] = self.partial_result.success_count
            payload["failure_count"] = self.partial_result.failure_count
        return payload


class ScaleImportError(ValueError):
    """
    Raised by ``StageResult.unwrap()`` when the stage failed.
    """

    def __init__(self, failure: ImportFailure) -> None:
        super().__init__(failure.message)
        self.failure = failure

    @property
    def code(self) -> FailureCode:
        return self.failure.code

    def to_dict(self) -> dict[str, Any]:
        return self.failure.to_dict()


@dataclass(frozen=True)
class StageResult(Generic[T]):
    """
    Either a stage value or a failure, never both.
    """

    value: T | None = None
    failure: ImportFailure | None = None

    @classmethod
    def success(cls, value: T) -> StageResult[T]:
        return cls(value=value)

    @classmethod
    def fail(
        cls,
        code: FailureCode,
        message: str,
        *,
        row_index: int | None = None,
        details: dict[str, Any] | None = None,
        partial_result: ImportResult | None = None,
    ) -> StageResult[T]:
        return cls(
            failure=ImportFailure(
                code=code,
                message=message,
                row_index=row_index,
                details=details or {},
                partial_result=partial_result,
            )
        )

    @property
    def ok(self) -> bool:
        return self.failure is None

    def unwrap(self) -> T:
        if self.failure is not None:
            raise ScaleImportError(self.failure)
        return self.value  # type: ignore[return-value]
