from __future__ import annotations

import math

import polars as pl
import pytest

from gridstore.core.coerce import coerce_for_spec, coerce_value, is_missing, parse_number
from gridstore.core.errors import CoercionError, ColumnNotFoundError
from gridstore.core.types import ColumnSpec, ColumnType, TableSchema

NUMERIC = ColumnSpec(name="mpg", type=ColumnType.NUMERIC, dtype=pl.Float64())
INTEGER = ColumnSpec(name="hp", type=ColumnType.INTEGER, dtype=pl.Int64())
TINY = ColumnSpec(name="carb", type=ColumnType.INTEGER, dtype=pl.Int8())
SINGLE = ColumnSpec(name="wt", type=ColumnType.NUMERIC, dtype=pl.Float32())
TEXT = ColumnSpec(name="model", type=ColumnType.TEXT, dtype=pl.String())
BOOLEAN = ColumnSpec(name="am", type=ColumnType.BOOLEAN, dtype=pl.Boolean())
CATEGORICAL = ColumnSpec(
    name="cyl",
    type=ColumnType.CATEGORICAL,
    dtype=pl.Enum(["4", "6", "8"]),
    levels=("4", "6", "8"),
)


def test_numeric_string_coerces_to_float() -> None:
    assert coerce_for_spec("22.5", NUMERIC) == 22.5
    assert coerce_for_spec(" 7 ", NUMERIC) == 7.0
    assert coerce_for_spec(3, NUMERIC) == 3.0


def test_numeric_rejects_text_and_bools() -> None:
    with pytest.raises(CoercionError) as ei:
        coerce_for_spec("not_a_number", NUMERIC)
    assert ei.value.column == "mpg"
    assert ei.value.expected_type == "numeric"
    with pytest.raises(CoercionError):
        coerce_for_spec(True, NUMERIC)


def test_numeric_must_fit_a_float32_column() -> None:
    assert coerce_for_spec("2.5", SINGLE) == 2.5
    assert coerce_for_spec(math.inf, SINGLE) == math.inf
    with pytest.raises(CoercionError, match="out of range for Float32"):
        coerce_for_spec("1e300", SINGLE)
    with pytest.raises(CoercionError, match="out of range"):
        coerce_for_spec(-1e39, SINGLE)
    assert coerce_for_spec("1e300", NUMERIC) == 1e300


def test_integer_truncates_toward_zero() -> None:
    assert coerce_for_spec("12", INTEGER) == 12
    assert coerce_for_spec("12.7", INTEGER) == 12
    assert coerce_for_spec(-3.9, INTEGER) == -3
    assert coerce_for_spec(5, INTEGER) == 5


def test_integer_rejects_out_of_range_and_non_finite() -> None:
    with pytest.raises(CoercionError, match="out of range"):
        coerce_for_spec(1000, TINY)
    with pytest.raises(CoercionError, match="not finite"):
        coerce_for_spec(math.inf, INTEGER)
    with pytest.raises(CoercionError):
        coerce_for_spec("twelve", INTEGER)


def test_text_stringifies_anything() -> None:
    assert coerce_for_spec(123, TEXT) == "123"
    assert coerce_for_spec("Mazda RX4", TEXT) == "Mazda RX4"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("TRUE", True), ("yes", True), (" y ", True), ("1", True), (1, True), (True, True),
     ("false", False), ("No", False), ("f", False), ("0", False), (0, False)],
)
def test_boolean_tokens(raw, expected) -> None:
    assert coerce_for_spec(raw, BOOLEAN) is expected


def test_boolean_rejects_unknown_tokens() -> None:
    with pytest.raises(CoercionError):
        coerce_for_spec("maybe", BOOLEAN)
    with pytest.raises(CoercionError):
        coerce_for_spec(2, BOOLEAN)


def test_categorical_requires_declared_level() -> None:
    assert coerce_for_spec("8", CATEGORICAL) == "8"
    assert coerce_for_spec(6.0, CATEGORICAL) == "6"
    assert coerce_for_spec(4, CATEGORICAL) == "4"
    with pytest.raises(CoercionError, match="level not recognized"):
        coerce_for_spec("5", CATEGORICAL)


@pytest.mark.parametrize("spec", [NUMERIC, INTEGER, TEXT, BOOLEAN, CATEGORICAL])
def test_missing_input_stays_missing(spec) -> None:
    assert coerce_for_spec(None, spec) is None
    assert coerce_for_spec(float("nan"), spec) is None


def test_coerce_value_uses_reference_schema() -> None:
    schema = TableSchema.from_frame(pl.DataFrame({"mpg": [21.0], "cyl": [6]}))
    assert coerce_value("22.5", "mpg", schema) == 22.5
    assert coerce_value("8", "cyl", schema) == 8
    with pytest.raises(ColumnNotFoundError):
        coerce_value("1", "wt", schema)


def test_helpers() -> None:
    assert is_missing(None) and is_missing(float("nan"))
    assert not is_missing("") and not is_missing(0)
    assert parse_number("1e3") == 1000.0
    assert parse_number(True) is None
    assert parse_number("abc") is None
