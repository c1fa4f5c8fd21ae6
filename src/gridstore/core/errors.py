"""
Core exception types raised by schema inference, cell validation and coercion.

Provides typed exceptions for core-domain failures:
- StructuralError for missing/invalid tables, out-of-bounds rows/columns, unknown
  columns and baseline/working structure mismatches.
- CoercionError for inputs that cannot be converted to a column's declared type
  (EmptyValueError for empty-string input rejected before coercion).
- DataLossError when coercion would turn a non-missing input into a missing cell.

All of them derive from GridStoreError, which carries a taxonomy ``kind``, a short
human-readable ``summary`` and free-form ``context``. The IO layer adds
StoreConnectionError and PersistenceError (see gridstore.io.errors).

Notes:
    - This module uses only the Python standard library and has no side effects.
    - Public DataStore operations call ``annotate`` to replace the summary with an
      operation headline (e.g. "Save operation failed") before re-raising.

Examples:
    >>> from gridstore.core.errors import RowOutOfBoundsError, ErrorKind
    >>> err = RowOutOfBoundsError(0, (1, 32))
    >>> err.kind is ErrorKind.STRUCTURAL
    True
    >>> "1-32" in str(err)
    True
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, ClassVar, Self

__all__ = [
    "ErrorKind",
    "GridStoreError",
    "StructuralError",
    "RowOutOfBoundsError",
    "ColumnOutOfBoundsError",
    "ColumnNotFoundError",
    "CoercionError",
    "EmptyValueError",
    "DataLossError",
]


class ErrorKind(StrEnum):
    """Taxonomy of failures surfaced by the data store."""

    STRUCTURAL = "structural"
    COERCION = "coercion"
    DATA_LOSS = "data_loss"
    CONNECTION = "connection"
    PERSISTENCE = "persistence"


class GridStoreError(Exception):
    """
    Base class for all gridstore failures.

    Attributes:
        kind (ErrorKind): Taxonomy tag, fixed per subclass.
        message (str): Detailed description of the first violated constraint.
        summary (str): Short headline suitable for a notification.
        context (dict[str, Any]): Operation context (cell, table, attempted action).
    """

    kind: ClassVar[ErrorKind]
    default_summary: ClassVar[str] = "Operation failed"

    def __init__(
        self,
        message: str,
        *,
        summary: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.summary = summary or self.default_summary
        self.context: dict[str, Any] = dict(context or {})

    @property
    def cause(self) -> BaseException | None:
        """Underlying exception, if this error wraps one."""
        return self.__cause__

    def annotate(self, summary: str, **context: Any) -> Self:
        """Replace the headline and add context keys that are not already set."""
        self.summary = summary
        for key, value in context.items():
            self.context.setdefault(key, value)
        return self

    def __str__(self) -> str:
        return f"{self.summary}: {self.message}"


class StructuralError(GridStoreError):
    """Table shape failure: missing data, bounds, unknown columns, structural drift."""

    kind = ErrorKind.STRUCTURAL
    default_summary = "Invalid table structure"


class RowOutOfBoundsError(StructuralError):
    """Row index outside ``valid_range`` (inclusive, 1-based)."""

    default_summary = "Invalid row index"

    def __init__(self, row: Any, valid_range: tuple[int, int]) -> None:
        lo, hi = valid_range
        super().__init__(
            f"row {row!r} is out of bounds (valid range: {lo}-{hi})",
            context={"row": row, "valid_range": valid_range},
        )
        self.row = row
        self.valid_range = valid_range


class ColumnOutOfBoundsError(StructuralError):
    """Positional column index outside ``valid_range`` (inclusive, 1-based)."""

    default_summary = "Invalid column index"

    def __init__(self, index: Any, valid_range: tuple[int, int]) -> None:
        lo, hi = valid_range
        super().__init__(
            f"column index {index!r} is out of bounds (valid range: {lo}-{hi})",
            context={"column": index, "valid_range": valid_range},
        )
        self.index = index
        self.valid_range = valid_range


class ColumnNotFoundError(StructuralError):
    """Column name not present in the table."""

    default_summary = "Column not found in dataset"

    def __init__(self, column: Any, available: list[str]) -> None:
        super().__init__(
            f"column {column!r} not found (available: {', '.join(available)})",
            context={"column": column, "available": list(available)},
        )
        self.column = column
        self.available = list(available)


class CoercionError(GridStoreError):
    """Input value cannot be converted to the target column's declared type."""

    kind = ErrorKind.COERCION
    default_summary = "Type coercion failed"

    def __init__(
        self,
        column: str,
        input_value: Any,
        expected_type: str,
        reason: str | None = None,
    ) -> None:
        msg = f"cannot convert {input_value!r} to {expected_type} for column {column!r}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(
            msg,
            context={"column": column, "value": input_value, "expected_type": expected_type},
        )
        self.column = column
        self.input_value = input_value
        self.expected_type = expected_type


class EmptyValueError(CoercionError):
    """Empty-string input, rejected before any coercion is attempted."""

    default_summary = "Empty value"

    def __init__(self, column: str, expected_type: str) -> None:
        super().__init__(column, "", expected_type, reason="value cannot be empty")


class DataLossError(GridStoreError):
    """Coercion produced a missing value from a non-missing input."""

    kind = ErrorKind.DATA_LOSS
    default_summary = "Type coercion resulted in data loss"

    def __init__(self, column: str, input_value: Any, coerced_value: Any) -> None:
        super().__init__(
            f"cannot convert {input_value!r} to a valid value for column {column!r} "
            f"(coerced to {coerced_value!r})",
            context={"column": column, "value": input_value},
        )
        self.column = column
        self.input_value = input_value
        self.coerced_value = coerced_value
