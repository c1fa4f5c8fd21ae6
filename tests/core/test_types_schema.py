from __future__ import annotations

from datetime import date

import polars as pl
import pytest

from gridstore.core.errors import ColumnNotFoundError, StructuralError
from gridstore.core.types import ColumnType, TableSchema, column_type_of


def _frame() -> pl.DataFrame:
    return pl.DataFrame(
        {
            "name": ["a", "b", "c"],
            "mpg": [21.0, 22.8, 18.7],
            "hp": pl.Series([110, 93, 175], dtype=pl.Int32),
            "am": [True, True, False],
            "cyl": pl.Series(["6", "4", "8"], dtype=pl.Enum(["4", "6", "8"])),
        }
    )


def test_schema_maps_dtypes_to_column_types_in_frame_order() -> None:
    schema = TableSchema.from_frame(_frame())

    assert schema.names == ("name", "mpg", "hp", "am", "cyl")
    assert [c.type for c in schema.columns] == [
        ColumnType.TEXT,
        ColumnType.NUMERIC,
        ColumnType.INTEGER,
        ColumnType.BOOLEAN,
        ColumnType.CATEGORICAL,
    ]
    assert schema.get("hp").dtype == pl.Int32
    assert len(schema) == 5
    assert "mpg" in schema and "wt" not in schema


def test_enum_levels_come_from_categories_not_observed_values() -> None:
    df = pl.DataFrame({"gear": pl.Series(["3", "3"], dtype=pl.Enum(["3", "4", "5"]))})
    spec = TableSchema.from_frame(df).get("gear")
    assert spec.levels == ("3", "4", "5")
    # Non-categorical columns carry no levels
    assert TableSchema.from_frame(_frame()).get("mpg").levels == ()


def test_unsupported_dtype_is_rejected() -> None:
    with pytest.raises(StructuralError, match="unsupported column dtype"):
        column_type_of(pl.Date())
    with pytest.raises(StructuralError):
        TableSchema.from_frame(pl.DataFrame({"d": [date(2024, 1, 1)]}))


def test_get_unknown_column_lists_available() -> None:
    schema = TableSchema.from_frame(_frame())
    with pytest.raises(ColumnNotFoundError) as ei:
        schema.get("wt")
    assert ei.value.available == list(schema.names)


def test_structural_mismatches_reports_missing_extra_order_and_dtype() -> None:
    df = _frame()
    schema = TableSchema.from_frame(df)

    assert schema.structural_mismatches(df) == []

    missing = schema.structural_mismatches(df.drop("am"))
    assert any("missing columns: am" in p for p in missing)

    extra = schema.structural_mismatches(df.with_columns(pl.lit(1).alias("wt")))
    assert any("extra columns: wt" in p for p in extra)

    reordered = schema.structural_mismatches(df.select(["mpg", "name", "hp", "am", "cyl"]))
    assert any("column order changed" in p for p in reordered)

    retyped = schema.structural_mismatches(df.with_columns(pl.col("hp").cast(pl.Int64)))
    assert any("'hp' dtype changed" in p for p in retyped)
