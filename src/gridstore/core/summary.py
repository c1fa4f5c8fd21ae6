"""
Summary statistics for the working table and a single-slot cache for them.

Summary
- rows / cols of the working frame and a display message ("Rows: 32 | Columns: 12").
- numeric_means: column name -> arithmetic mean for numeric and integer columns,
  excluding missing values (null and NaN). None when the table has no such column;
  a column with no non-missing values maps to None.

SummaryCache
- Holds at most one Summary together with the modification counter (always 0) it
  was computed against. ``get`` hands it back only while the store is clean;
  ``invalidate`` clears the slot unconditionally.
"""

from __future__ import annotations

import polars as pl
from pydantic import BaseModel, ConfigDict

from .validate import ensure_rows

__all__ = [
    "Summary",
    "SummaryCache",
    "compute_summary",
    "numeric_columns",
]


class Summary(BaseModel):
    """
    Derived view of the working table for UI display.

    Attributes:
        rows (int): Row count.
        cols (int): Column count.
        message (str): Human-readable one-liner.
        numeric_means (dict[str, float | None] | None): Mean per numeric/integer column.

    Examples:
        >>> import polars as pl
        >>> s = compute_summary(pl.DataFrame({"mpg": [20.0, 22.0], "name": ["a", "b"]}))
        >>> s.message, s.numeric_means
        ('Rows: 2 | Columns: 2', {'mpg': 21.0})
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    rows: int
    cols: int
    message: str
    numeric_means: dict[str, float | None] | None = None


def numeric_columns(df: pl.DataFrame) -> list[str]:
    """Names of float and integer columns, in frame order."""
    return [name for name, dtype in df.schema.items() if dtype.is_float() or dtype.is_integer()]


def _mean_expr(name: str, dtype: pl.DataType) -> pl.Expr:
    col = pl.col(name)
    if dtype.is_float():
        col = col.fill_nan(None)
    return col.mean().alias(name)


def compute_summary(df: pl.DataFrame) -> Summary:
    """
    Compute a Summary for ``df``.

    Raises:
        StructuralError: If ``df`` is not a loaded, non-empty table.
    """
    ensure_rows(df)
    cols = numeric_columns(df)
    means: dict[str, float | None] | None = None
    if cols:
        row = df.select([_mean_expr(c, df.schema[c]) for c in cols]).row(0, named=True)
        means = {c: (None if v is None else float(v)) for c, v in row.items()}
    return Summary(
        rows=df.height,
        cols=df.width,
        message=f"Rows: {df.height} | Columns: {df.width}",
        numeric_means=means,
    )


class SummaryCache:
    """Single-slot memo for the summary of a clean store."""

    def __init__(self) -> None:
        self._value: Summary | None = None
        self._computed_at: int | None = None

    def get(self, modified_count: int) -> Summary | None:
        if self._value is None or modified_count != 0 or self._computed_at != 0:
            return None
        return self._value

    def put(self, summary: Summary, modified_count: int) -> None:
        # Only a clean store's summary is worth keeping.
        if modified_count == 0:
            self._value = summary
            self._computed_at = modified_count

    def invalidate(self) -> None:
        self._value = None
        self._computed_at = None

    @property
    def is_empty(self) -> bool:
        return self._value is None
