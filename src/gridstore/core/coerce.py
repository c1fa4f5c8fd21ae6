"""
Type coercion of user input toward a column's declared type.

``coerce_value`` looks the column up in the reference schema (always built from the
baseline ``original`` frame, never ``working``) and dispatches on its ColumnType.
It is pure: no IO, no mutation, and every failure is a CoercionError.

Rules per type:
    - numeric: float(); bools rejected; NaN results are returned as missing; a finite
      value must stay finite in the baseline float dtype (Float32 overflow fails).
    - integer: int, or float truncated toward zero; strings may be "12" or "12.7";
      the result must fit the baseline integer dtype.
    - text: str() of anything.
    - boolean: bool as-is; ints 0/1; tokens true/t/yes/y/1 and false/f/no/n/0
      (case-insensitive).
    - categorical: str() of the value (integral floats without ".0") must be one of
      the declared levels.

Missing input (None or float NaN) always coerces to None.
"""

from __future__ import annotations

import math
from typing import Any, assert_never

import polars as pl

from .constants import BOOLEAN_FALSE_TOKENS, BOOLEAN_TRUE_TOKENS
from .errors import CoercionError
from .types import ColumnSpec, ColumnType, TableSchema

__all__ = [
    "is_missing",
    "parse_number",
    "coerce_value",
    "coerce_for_spec",
]


def is_missing(value: Any) -> bool:
    """True for None and float NaN."""
    return value is None or (isinstance(value, float) and math.isnan(value))


def parse_number(value: Any) -> float | None:
    """
    Parse ``value`` as a float, returning None when it is not a number.

    Bools are not numbers here, even though Python treats them as ints.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        text = value.strip() if isinstance(value, str) else value
        return float(text)
    except (TypeError, ValueError, OverflowError):
        return None


def _to_numeric(value: Any, spec: ColumnSpec) -> float | None:
    out = parse_number(value)
    if out is None:
        raise CoercionError(spec.name, value, spec.type.value, reason="not a number")
    if math.isnan(out):
        return None
    if math.isfinite(out) and spec.dtype != pl.Float64:
        # A finite input must stay finite in a narrower float column (Float32).
        stored = pl.Series([out], dtype=pl.Float64).cast(spec.dtype)[0]
        if stored is None or not math.isfinite(stored):
            raise CoercionError(
                spec.name, value, spec.type.value, reason=f"out of range for {spec.dtype}"
            )
    return out


def _to_integer(value: Any, spec: ColumnSpec) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        out = value
    else:
        if isinstance(value, str):
            try:
                return _check_fits(int(value.strip()), value, spec)
            except ValueError:
                pass
        number = parse_number(value)
        if number is None:
            raise CoercionError(spec.name, value, spec.type.value, reason="not a number")
        if math.isnan(number):
            return None
        if math.isinf(number):
            raise CoercionError(spec.name, value, spec.type.value, reason="not finite")
        out = math.trunc(number)
    return _check_fits(out, value, spec)


def _check_fits(out: int, value: Any, spec: ColumnSpec) -> int:
    try:
        pl.Series([out]).cast(spec.dtype, strict=True)
    except (pl.exceptions.PolarsError, OverflowError, ValueError, TypeError) as exc:
        raise CoercionError(
            spec.name, value, spec.type.value, reason=f"out of range for {spec.dtype}"
        ) from exc
    return out


def _to_text(value: Any, spec: ColumnSpec) -> str:
    return str(value)


def _to_boolean(value: Any, spec: ColumnSpec) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        token = value.strip().lower()
        if token in BOOLEAN_TRUE_TOKENS:
            return True
        if token in BOOLEAN_FALSE_TOKENS:
            return False
    raise CoercionError(
        spec.name,
        value,
        spec.type.value,
        reason="expected one of true/false, yes/no, 1/0",
    )


def _to_categorical(value: Any, spec: ColumnSpec) -> str:
    if isinstance(value, float) and value.is_integer():
        label = str(int(value))
    else:
        label = str(value).strip() if isinstance(value, str) else str(value)
    if label not in spec.levels:
        raise CoercionError(
            spec.name,
            value,
            spec.type.value,
            reason=f"level not recognized; levels: {', '.join(spec.levels)}",
        )
    return label


def coerce_for_spec(value: Any, spec: ColumnSpec) -> Any:
    """
    Coerce ``value`` toward ``spec.type``.

    Returns:
        The typed value, or None for missing input.

    Raises:
        CoercionError: If the value cannot be represented in the column's type.
    """
    if is_missing(value):
        return None
    match spec.type:
        case ColumnType.NUMERIC:
            return _to_numeric(value, spec)
        case ColumnType.INTEGER:
            return _to_integer(value, spec)
        case ColumnType.TEXT:
            return _to_text(value, spec)
        case ColumnType.BOOLEAN:
            return _to_boolean(value, spec)
        case ColumnType.CATEGORICAL:
            return _to_categorical(value, spec)
        case _:
            assert_never(spec.type)


def coerce_value(value: Any, column: str, schema: TableSchema) -> Any:
    """
    Coerce ``value`` to the declared type of ``column`` in ``schema``.

    Args:
        value: Arbitrary input (usually a string from a grid editor).
        column (str): Canonical column name.
        schema (TableSchema): Reference schema built from the baseline frame.

    Raises:
        ColumnNotFoundError: If ``column`` is not in the schema.
        CoercionError: If conversion fails.

    Examples:
        >>> import polars as pl
        >>> from gridstore.core.types import TableSchema
        >>> schema = TableSchema.from_frame(pl.DataFrame({"mpg": [21.0]}))
        >>> coerce_value("22.5", "mpg", schema)
        22.5
    """
    return coerce_for_spec(value, schema.get(column))
