"""
Core package for gridstore contracts (column types, coercion, validation, summary, errors).

## Contracts
- Types: ColumnType and the TableSchema read from a baseline frame.
- Coercion: pure conversion of user input toward a column's declared type.
- Validation: row/column addressability, empty-input and data-loss checks, and
  save-time structural checks.
- Summary: derived statistics and the single-slot SummaryCache.
- Errors: the GridStoreError taxonomy (structural, coercion, data loss).

## Notes
- Zero-IO policy: stdlib + polars + pydantic only; no file/database access.
- Rows and positional columns are 1-based at this layer.

## Downstream usage
- gridstore.io: persistence gateways; adds connection/persistence errors.
- gridstore.editor: DataStore composes validation + coercion for every edit.

## Examples
```python
import polars as pl
from gridstore.core import TableSchema, coerce_value

schema = TableSchema.from_frame(pl.DataFrame({"mpg": [21.0, 22.8]}))
coerce_value("22.5", "mpg", schema)  # 22.5
```
"""

from __future__ import annotations

from .coerce import coerce_value
from .errors import (
    CoercionError,
    DataLossError,
    ErrorKind,
    GridStoreError,
    StructuralError,
)
from .summary import Summary, SummaryCache, compute_summary
from .types import ColumnSpec, ColumnType, TableSchema

__all__ = [
    "ColumnSpec",
    "ColumnType",
    "TableSchema",
    "coerce_value",
    "Summary",
    "SummaryCache",
    "compute_summary",
    "ErrorKind",
    "GridStoreError",
    "StructuralError",
    "CoercionError",
    "DataLossError",
]
