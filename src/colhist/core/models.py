"""Base models and types used across all modules.

This module contains the fundamental types that don't belong to any specific
component (parsing, expression, histogram, pipeline).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

import numpy as np
from pydantic import BaseModel, Field

T = TypeVar("T")


class Result(BaseModel, Generic[T]):
    """Result type for operations that can fail.

    Use this instead of exceptions for expected failures.
    Exceptions are reserved for unexpected/programming errors.
    """

    success: bool
    value: T | None = None
    error: str | None = None
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def ok(cls, value: T, warnings: list[str] | None = None) -> Result[T]:
        """Create a successful result."""
        return cls(success=True, value=value, warnings=warnings or [])

    @classmethod
    def fail(cls, error: str) -> Result[T]:
        """Create a failed result."""
        return cls(success=False, error=error)

    def unwrap(self) -> T:
        """Get the value or raise if failed."""
        if not self.success:
            raise ValueError(f"Result failed: {self.error}")
        assert self.value is not None
        return self.value

    def map(self, fn: Callable[[T], Any]) -> Result[Any]:
        """Transform the value if successful."""
        if self.success and self.value is not None:
            return Result.ok(fn(self.value), self.warnings)
        return self


# === Enums ===


class Precision(str, Enum):
    """Floating point width used for parsing and binning."""

    FLOAT32 = "float32"
    FLOAT64 = "float64"

    @property
    def dtype(self) -> np.dtype:
        """The numpy dtype backing this precision."""
        return np.dtype(self.value)


class ErrorPolicy(str, Enum):
    """What a run does with a row that fails extraction."""

    LENIENT = "lenient"  # Skip the row and keep going
    STRICT = "strict"  # Abort the run on the first failure


class MissingPolicy(str, Enum):
    """What the column parser does when a requested column is absent."""

    ERROR = "error"  # Report a missing_column error
    SKIP = "skip"  # Produce no value and no error


class RowErrorKind(str, Enum):
    """Per-row failure categories."""

    MISSING_COLUMN = "missing_column"
    FAILED_PARSE = "failed_parse"
    FAILED_READ = "failed_read"
    FAILED_EVALUATION = "failed_evaluation"


# === Per-row outcomes ===


@dataclass(frozen=True)
class RowError:
    """A failure confined to a single row.

    Row errors are values, not exceptions: the caller decides whether to skip
    the row or abort the run.
    """

    kind: RowErrorKind
    message: str
    line_number: int | None = None
    column: int | None = None
    token: str | None = None

    @classmethod
    def missing_column(cls, row: str, column: int, line_number: int | None = None) -> RowError:
        return cls(
            kind=RowErrorKind.MISSING_COLUMN,
            message=f"column {column} out of bounds in row {row!r}",
            line_number=line_number,
            column=column,
        )

    @classmethod
    def failed_parse(
        cls,
        token: str,
        type_name: str,
        column: int | None = None,
        line_number: int | None = None,
    ) -> RowError:
        return cls(
            kind=RowErrorKind.FAILED_PARSE,
            message=f"failed to parse {type_name} from {token!r}",
            line_number=line_number,
            column=column,
            token=token,
        )

    @classmethod
    def failed_read(cls, reason: str, line_number: int | None = None) -> RowError:
        return cls(
            kind=RowErrorKind.FAILED_READ,
            message=f"failed to read row: {reason}",
            line_number=line_number,
        )

    @classmethod
    def failed_evaluation(cls, reason: str, line_number: int | None = None) -> RowError:
        return cls(
            kind=RowErrorKind.FAILED_EVALUATION,
            message=f"failed to evaluate expression: {reason}",
            line_number=line_number,
        )

    def __str__(self) -> str:
        if self.line_number is None:
            return self.message
        return f"line {self.line_number}: {self.message}"


@dataclass(frozen=True)
class RowResult(Generic[T]):
    """Outcome of processing one row.

    Exactly one of three states:
    - a value (``success``)
    - an error (``failed``)
    - neither, when the row produced no value and that is not an error
      (``skipped``)
    """

    value: T | None = None
    error: RowError | None = None

    @classmethod
    def ok(cls, value: T) -> RowResult[T]:
        return cls(value=value)

    @classmethod
    def fail(cls, error: RowError) -> RowResult[T]:
        return cls(error=error)

    @classmethod
    def skip(cls) -> RowResult[T]:
        return cls()

    @property
    def success(self) -> bool:
        return self.error is None and self.value is not None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def skipped(self) -> bool:
        return self.error is None and self.value is None

    def unwrap(self) -> T:
        """Get the value or raise if the row failed or was skipped."""
        if self.error is not None:
            raise ValueError(f"Row failed: {self.error}")
        if self.value is None:
            raise ValueError("Row produced no value")
        return self.value
