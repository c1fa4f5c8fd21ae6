"""
Column types and table schema derived from a baseline frame.

A table's schema is never declared separately: it is read from the dtypes of the
``original`` frame loaded from the backing store and is authoritative for every
later coercion (input is coerced toward the declared type, never the reverse).

Dtype mapping (polars -> ColumnType):
    - Float32/Float64              -> NUMERIC
    - Int8..Int64, UInt8..UInt64   -> INTEGER
    - String                       -> TEXT
    - Boolean                      -> BOOLEAN
    - Enum / Categorical           -> CATEGORICAL (levels from the Enum categories,
                                      or the observed values for Categorical)

Any other dtype (dates, lists, structs, ...) is rejected with StructuralError.

Examples:
    >>> import polars as pl
    >>> from gridstore.core.types import ColumnType, TableSchema
    >>> schema = TableSchema.from_frame(pl.DataFrame({"mpg": [21.0], "cyl": [6]}))
    >>> schema.get("mpg").type is ColumnType.NUMERIC
    True
    >>> schema.names
    ('mpg', 'cyl')
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

import polars as pl

from .errors import ColumnNotFoundError, StructuralError

__all__ = [
    "ColumnType",
    "ColumnSpec",
    "TableSchema",
    "column_type_of",
]


class ColumnType(StrEnum):
    """Closed set of column types a cell can be coerced toward."""

    NUMERIC = "numeric"
    INTEGER = "integer"
    TEXT = "text"
    BOOLEAN = "boolean"
    CATEGORICAL = "categorical"


def column_type_of(dtype: pl.DataType) -> ColumnType:
    """
    Map a polars dtype to its ColumnType.

    Raises:
        StructuralError: If the dtype has no ColumnType counterpart.
    """
    if dtype.is_float():
        return ColumnType.NUMERIC
    if dtype.is_integer():
        return ColumnType.INTEGER
    if dtype == pl.String:
        return ColumnType.TEXT
    if dtype == pl.Boolean:
        return ColumnType.BOOLEAN
    if isinstance(dtype, (pl.Enum, pl.Categorical)):
        return ColumnType.CATEGORICAL
    raise StructuralError(f"unsupported column dtype {dtype}")


def _levels_of(series: pl.Series) -> tuple[str, ...]:
    dtype = series.dtype
    if isinstance(dtype, pl.Enum):
        return tuple(dtype.categories.to_list())
    return tuple(series.drop_nulls().cast(pl.String).unique(maintain_order=True).to_list())


@dataclass(frozen=True)
class ColumnSpec:
    """
    Declared type of a single column.

    Attributes:
        name (str): Column name.
        type (ColumnType): Coercion target.
        dtype (pl.DataType): Exact polars dtype of the baseline column; cells are cast
            to it when written so the working frame never drifts from the baseline.
        levels (tuple[str, ...]): Allowed values for CATEGORICAL columns; empty otherwise.
    """

    name: str
    type: ColumnType
    dtype: pl.DataType
    levels: tuple[str, ...] = ()


@dataclass(frozen=True)
class TableSchema:
    """
    Ordered column specs of a table.

    Notes:
        - Built from the baseline frame with ``from_frame``.
        - ``structural_mismatches`` compares frames against this schema (names, order,
          dtypes) and is used by save-time validation.
    """

    columns: tuple[ColumnSpec, ...]
    _by_name: dict[str, ColumnSpec] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_name", {c.name: c for c in self.columns})

    @classmethod
    def from_frame(cls, df: pl.DataFrame) -> TableSchema:
        specs = []
        for name, dtype in df.schema.items():
            ctype = column_type_of(dtype)
            levels = _levels_of(df.get_column(name)) if ctype is ColumnType.CATEGORICAL else ()
            specs.append(ColumnSpec(name=name, type=ctype, dtype=dtype, levels=levels))
        return cls(columns=tuple(specs))

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(c.name for c in self.columns)

    def get(self, name: str) -> ColumnSpec:
        """
        Look up a column spec by name.

        Raises:
            ColumnNotFoundError: If the column is not part of the schema.
        """
        try:
            return self._by_name[name]
        except KeyError:
            raise ColumnNotFoundError(name, list(self.names)) from None

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self.columns)

    def structural_mismatches(self, df: pl.DataFrame) -> list[str]:
        """
        Describe how ``df`` departs from this schema (empty list when it matches).

        Checks column presence (missing/extra), column order and per-column dtype.
        Row count is not part of the schema and is checked by the caller.
        """
        problems: list[str] = []
        current = list(df.columns)
        expected = list(self.names)
        missing = [c for c in expected if c not in current]
        extra = [c for c in current if c not in expected]
        if missing:
            problems.append(f"missing columns: {', '.join(missing)}")
        if extra:
            problems.append(f"extra columns: {', '.join(extra)}")
        if not missing and not extra and current != expected:
            problems.append(f"column order changed: {', '.join(current)}")
        for spec in self.columns:
            if spec.name in df.schema and df.schema[spec.name] != spec.dtype:
                problems.append(
                    f"column {spec.name!r} dtype changed: expected {spec.dtype}, "
                    f"found {df.schema[spec.name]}"
                )
        return problems
