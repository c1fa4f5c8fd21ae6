"""
Cell and table validation for the data store.

Purpose
- Check addressability (row bounds, column resolution) and coercion safety before a
  single-cell mutation is applied.
- Check that a working frame still matches its baseline before it is persisted.

Update phases (composed by DataStore.update_cell, in this order):
    1. ensure_table          data exists and is a frame with columns
    2. validate_row_index    1-based row in [1, height]
    3. resolve_column        name or 1-based position -> canonical name
    4. reject_empty_input    "" is rejected before coercion
    5. precheck_type         numeric/integer columns need a number-like input
    6. coerce_for_spec       see gridstore.core.coerce
    7. validate_no_silent_loss

Each phase raises on the first violated constraint; later phases never run.

Notes
- All functions are pure; they never mutate the frames they inspect.
"""

from __future__ import annotations

import math
from typing import Any

import polars as pl

from .coerce import is_missing, parse_number
from .constants import FIRST_COLUMN, FIRST_ROW
from .errors import (
    CoercionError,
    ColumnNotFoundError,
    ColumnOutOfBoundsError,
    DataLossError,
    EmptyValueError,
    RowOutOfBoundsError,
    StructuralError,
)
from .types import ColumnSpec, ColumnType, TableSchema

__all__ = [
    "ensure_table",
    "ensure_rows",
    "validate_row_index",
    "resolve_column",
    "reject_empty_input",
    "precheck_type",
    "validate_no_silent_loss",
    "validate_save_structure",
]


def _as_index(value: Any) -> int | None:
    # Accept ints and integral floats; bools are not indices.
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def ensure_table(df: Any) -> pl.DataFrame:
    """
    Ensure a table is loaded.

    Raises:
        StructuralError: If ``df`` is not a polars DataFrame or has no columns.
    """
    if not isinstance(df, pl.DataFrame):
        raise StructuralError(
            f"no data loaded or invalid data structure (expected DataFrame, got {type(df).__name__})"
        )
    if df.width == 0:
        raise StructuralError("no data loaded (table has no columns)")
    return df


def ensure_rows(df: Any) -> pl.DataFrame:
    """
    Ensure a table is loaded and has at least one row.

    Raises:
        StructuralError: If the table is missing, has no columns or no rows.
    """
    ensure_table(df)
    if df.height == 0:
        raise StructuralError("data must be a non-empty table (0 rows)")
    return df


def validate_row_index(row: Any, df: pl.DataFrame) -> int:
    """
    Validate a 1-based row index.

    Returns:
        int: The row index as an int.

    Raises:
        StructuralError: If ``row`` is not integer-like.
        RowOutOfBoundsError: If ``row`` is outside [1, height].
    """
    idx = _as_index(row)
    valid = (FIRST_ROW, df.height)
    if idx is None:
        raise StructuralError(
            f"row index must be an integer, got {row!r}",
            context={"row": row, "valid_range": valid},
        )
    if idx < FIRST_ROW or idx > df.height:
        raise RowOutOfBoundsError(row, valid)
    return idx


def resolve_column(column: Any, df: pl.DataFrame) -> str:
    """
    Resolve a column name or 1-based position to the canonical column name.

    Raises:
        ColumnOutOfBoundsError: Positional index outside [1, width].
        ColumnNotFoundError: Name not in the table.
    """
    if isinstance(column, str):
        if column not in df.columns:
            raise ColumnNotFoundError(column, df.columns)
        return column
    idx = _as_index(column)
    if idx is None:
        raise ColumnNotFoundError(column, df.columns)
    if idx < FIRST_COLUMN or idx > df.width:
        raise ColumnOutOfBoundsError(column, (FIRST_COLUMN, df.width))
    return df.columns[idx - FIRST_COLUMN]


def reject_empty_input(value: Any, spec: ColumnSpec) -> None:
    """
    Raises:
        EmptyValueError: If ``value`` is the empty string.
    """
    if isinstance(value, str) and value == "":
        raise EmptyValueError(spec.name, spec.type.value)


def precheck_type(value: Any, spec: ColumnSpec) -> None:
    """
    Cheap compatibility check before coercion.

    Numeric and integer columns require a number-like, non-NaN input. Missing input
    passes (missing -> missing is allowed); other column types are left to coercion.

    Raises:
        CoercionError: If a numeric/integer column receives a non-number.
    """
    if is_missing(value):
        return
    if spec.type not in (ColumnType.NUMERIC, ColumnType.INTEGER):
        return
    number = parse_number(value)
    if number is None or math.isnan(number):
        raise CoercionError(
            spec.name, value, spec.type.value, reason=f"invalid numeric value {value!r}"
        )


def validate_no_silent_loss(coerced: Any, original_input: Any, column: str) -> None:
    """
    Reject a coercion that turned a non-missing input into a missing value.

    Raises:
        DataLossError: If ``coerced`` is missing while ``original_input`` is not.
    """
    if is_missing(coerced) and not is_missing(original_input):
        raise DataLossError(column, original_input, coerced)


def validate_save_structure(df: pl.DataFrame, original: pl.DataFrame, schema: TableSchema) -> None:
    """
    Ensure the working frame is structurally identical to the baseline.

    Checks column names/order/dtypes against ``schema`` and row count against
    ``original``.

    Raises:
        StructuralError: Listing every detected mismatch.
    """
    problems = schema.structural_mismatches(df)
    if df.height != original.height:
        problems.append(
            f"row count mismatch: expected {original.height} rows, found {df.height} rows"
        )
    if problems:
        raise StructuralError(
            "data structure does not match original: " + "; ".join(problems),
            context={
                "original_shape": original.shape,
                "current_shape": df.shape,
            },
        )
