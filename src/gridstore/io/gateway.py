"""
Persistence gateway contract consumed by the DataStore.

A gateway owns exactly one backing connection (a DuckDB connection or a parquet
root directory) from construction until ``close()``. The DataStore only ever calls
the four methods below.

Contract
- load_table(name): full read of a named table. On failure (missing table, IO error)
  returns an empty DataFrame and logs a warning; the caller decides whether an empty
  table is acceptable.
- replace_table(name, df): discard all prior rows and write ``df`` in full, atomically
  from the caller's perspective. Afterwards load_table(name) returns exactly ``df``.
  Raises PersistenceError on failure, leaving the previous table in place.
- is_connection_live(): cheap, deterministic liveness check; False once closed.
- close(): release the connection; idempotent.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import polars as pl

from .config import StoreSettings

__all__ = [
    "TableGateway",
    "open_gateway",
]


@runtime_checkable
class TableGateway(Protocol):
    def load_table(self, table_name: str) -> pl.DataFrame: ...

    def replace_table(self, table_name: str, df: pl.DataFrame) -> None: ...

    def is_connection_live(self) -> bool: ...

    def close(self) -> None: ...


def open_gateway(settings: StoreSettings) -> TableGateway:
    """
    Open the gateway selected by ``settings.backend``.

    Raises:
        StoreConnectionError: If the backing store cannot be opened.
    """
    if settings.backend == "parquet":
        from .parquet import ParquetGateway

        return ParquetGateway(
            settings.db_path,
            read_only=settings.read_only,
            create_if_missing=settings.create_if_missing,
        )

    from .db import DuckDbGateway

    return DuckDbGateway.open(
        settings.db_path,
        read_only=settings.read_only,
        create_if_missing=settings.create_if_missing,
    )
