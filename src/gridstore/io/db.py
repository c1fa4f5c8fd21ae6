"""
DuckDB backend for the persistence gateway.

Overview
- open_connection(): validates the database location and opens one connection.
- load_table(): SELECT * into a polars DataFrame; empty frame + warning on failure.
- replace_table(): CREATE OR REPLACE TABLE ... AS SELECT from the registered arrow
  table, inside a single transaction (rolled back on failure).
- is_connection_live() / ensure_connection(): liveness checks before writes.

Notes
- Table names are validated as plain identifiers and double-quoted in SQL.
- Row order is preserved through DuckDB's insertion-order guarantee for plain scans.
- polars Enum and Categorical columns are stored as DuckDB ENUM. Their polars kind
  and level order are recorded in ``_gridstore_columns`` so load_table restores the
  exact dtype.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Self

import duckdb
import polars as pl

from .config import validate_table_name
from .errors import PersistenceError, StoreConnectionError
from .fs import exists, is_writable_dir, makedirs

logger = logging.getLogger(__name__)

_REPLACE_SOURCE = "_gridstore_replace_source"
_COLUMNS_TABLE = '"_gridstore_columns"'


def _ident(table_name: str) -> str:
    return f'"{validate_table_name(table_name)}"'


def _quote_column(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _quote_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def categorical_columns(df: pl.DataFrame) -> list[tuple[str, str, list[str]]]:
    """
    List the Enum/Categorical columns of ``df`` as ``(name, kind, levels)``.

    Enum levels are the declared categories in order. Categorical levels are the
    observed non-null values in first-seen order.
    """
    out: list[tuple[str, str, list[str]]] = []
    for name, dtype in df.schema.items():
        if isinstance(dtype, pl.Enum):
            out.append((name, "enum", dtype.categories.to_list()))
        elif isinstance(dtype, pl.Categorical):
            levels = (
                df.get_column(name).drop_nulls().cast(pl.String).unique(maintain_order=True)
            )
            out.append((name, "categorical", levels.to_list()))
    return out


def _select_list(df: pl.DataFrame, categorical: list[tuple[str, str, list[str]]]) -> str:
    levels_by_name = {name: levels for name, _, levels in categorical}
    parts = []
    for name in df.columns:
        col = _quote_column(name)
        levels = levels_by_name.get(name)
        if levels:
            enum = ", ".join(_quote_literal(level) for level in levels)
            parts.append(f"CAST({col} AS ENUM({enum})) AS {col}")
        else:
            parts.append(col)
    return ", ".join(parts)


def _write_column_kinds(
    con: duckdb.DuckDBPyConnection,
    table_name: str,
    categorical: list[tuple[str, str, list[str]]],
) -> None:
    con.execute(
        f"CREATE TABLE IF NOT EXISTS {_COLUMNS_TABLE} "
        "(table_name VARCHAR, column_name VARCHAR, kind VARCHAR, levels VARCHAR)"
    )
    con.execute(f"DELETE FROM {_COLUMNS_TABLE} WHERE table_name = ?", [table_name])
    for name, kind, levels in categorical:
        con.execute(
            f"INSERT INTO {_COLUMNS_TABLE} VALUES (?, ?, ?, ?)",
            [table_name, name, kind, json.dumps(levels)],
        )


def _read_column_kinds(
    con: duckdb.DuckDBPyConnection, table_name: str
) -> dict[str, tuple[str, list[str]]]:
    try:
        rows = con.execute(
            f"SELECT column_name, kind, levels FROM {_COLUMNS_TABLE} WHERE table_name = ?",
            [table_name],
        ).fetchall()
    except duckdb.CatalogException:
        # Database written without categorical columns (or by another tool).
        return {}
    return {name: (kind, json.loads(levels)) for name, kind, levels in rows}


def _restore_categoricals(
    df: pl.DataFrame, kinds: dict[str, tuple[str, list[str]]]
) -> pl.DataFrame:
    casts = []
    for name, (kind, levels) in kinds.items():
        if name not in df.columns:
            continue
        target = pl.Enum(levels) if kind == "enum" else pl.Categorical()
        casts.append(pl.col(name).cast(pl.String).cast(target))
    return df.with_columns(casts) if casts else df


def open_connection(
    db_path: str,
    *,
    read_only: bool = False,
    create_if_missing: bool = False,
) -> duckdb.DuckDBPyConnection:
    """
    Open a DuckDB connection to ``db_path``.

    Args:
        db_path (str): Database file.
        read_only (bool): Open in read-only mode.
        create_if_missing (bool): Create the parent directory and database when absent.

    Raises:
        StoreConnectionError: Directory not writable, file missing, or DuckDB refused
            the connection.
    """
    db_dir = os.path.dirname(os.path.abspath(db_path))
    if create_if_missing and not read_only:
        try:
            makedirs(db_dir, exist_ok=True)
        except OSError as exc:
            raise StoreConnectionError(
                f"cannot create database directory {db_dir!r}: {exc}",
                context={"db_path": db_path},
            ) from exc
    if not read_only and not is_writable_dir(db_dir):
        raise StoreConnectionError(
            f"database directory {db_dir!r} does not exist or is not writable",
            context={"db_path": db_path},
        )
    if not exists(db_path) and not create_if_missing:
        raise StoreConnectionError(
            f"database file {db_path!r} not found", context={"db_path": db_path}
        )
    try:
        return duckdb.connect(db_path, read_only=read_only)
    except duckdb.Error as exc:
        raise StoreConnectionError(
            f"failed to connect to {db_path!r} (read_only={read_only}): {exc}",
            context={"db_path": db_path, "read_only": read_only},
        ) from exc


def is_connection_live(con: Any) -> bool:
    """True if ``con`` is an open DuckDB connection that answers a trivial query."""
    if not isinstance(con, duckdb.DuckDBPyConnection):
        return False
    try:
        con.execute("SELECT 1").fetchone()
    except duckdb.Error:
        return False
    return True


def ensure_connection(con: Any) -> duckdb.DuckDBPyConnection:
    """
    Raises:
        StoreConnectionError: If ``con`` is None, not a DuckDB connection, or not live.
    """
    if con is None:
        raise StoreConnectionError("connection is None")
    if not isinstance(con, duckdb.DuckDBPyConnection):
        raise StoreConnectionError(
            f"not a valid DuckDB connection object ({type(con).__name__})"
        )
    if not is_connection_live(con):
        raise StoreConnectionError("connection is not valid (closed or broken)")
    return con


def load_table(con: duckdb.DuckDBPyConnection, table_name: str) -> pl.DataFrame:
    """
    Read an entire table with type preservation.

    Returns:
        pl.DataFrame: Table contents, or an empty DataFrame when the read fails.
    """
    ident = _ident(table_name)
    try:
        df = con.execute(f"SELECT * FROM {ident}").pl()
    except duckdb.Error as exc:
        logger.warning(
            "Failed to load table %r from DuckDB, initializing with empty dataset: %s",
            table_name,
            exc,
        )
        return pl.DataFrame()
    return _restore_categoricals(df, _read_column_kinds(con, table_name))


def replace_table(con: duckdb.DuckDBPyConnection, table_name: str, df: pl.DataFrame) -> None:
    """
    Replace the contents of ``table_name`` with ``df`` in one transaction.

    Raises:
        StoreConnectionError: If the connection is not usable.
        PersistenceError: If DuckDB rejects the write; the previous table is kept.
    """
    ident = _ident(table_name)
    ensure_connection(con)
    categorical = categorical_columns(df)
    select = _select_list(df, categorical) if df.width else "*"
    try:
        con.register(_REPLACE_SOURCE, df.to_arrow())
        try:
            con.begin()
            con.execute(
                f"CREATE OR REPLACE TABLE {ident} AS SELECT {select} FROM {_REPLACE_SOURCE}"
            )
            _write_column_kinds(con, table_name, categorical)
            con.commit()
        except duckdb.Error:
            _rollback(con, table_name)
            raise
        finally:
            con.unregister(_REPLACE_SOURCE)
    except duckdb.Error as exc:
        raise PersistenceError(
            f"failed to write {df.height} rows x {df.width} columns to {table_name!r}: {exc}",
            context={"table": table_name, "rows": df.height, "cols": df.width},
        ) from exc


def _rollback(con: duckdb.DuckDBPyConnection, table_name: str) -> None:
    try:
        con.rollback()
    except duckdb.Error as exc:
        # No transaction was open (BEGIN itself failed).
        logger.debug("Rollback after failed replace of %r: %s", table_name, exc)


class DuckDbGateway:
    """
    TableGateway over a single DuckDB connection.

    Usage:
        with DuckDbGateway.open("data/mtcars.duckdb") as gw:
            df = gw.load_table("mtcars")
    """

    def __init__(self, con: duckdb.DuckDBPyConnection) -> None:
        self._con: duckdb.DuckDBPyConnection | None = con

    @classmethod
    def open(
        cls,
        db_path: str,
        *,
        read_only: bool = False,
        create_if_missing: bool = False,
    ) -> DuckDbGateway:
        return cls(
            open_connection(db_path, read_only=read_only, create_if_missing=create_if_missing)
        )

    @property
    def connection(self) -> duckdb.DuckDBPyConnection | None:
        return self._con

    def load_table(self, table_name: str) -> pl.DataFrame:
        if self._con is None:
            logger.warning("Failed to load table %r: connection closed", table_name)
            return pl.DataFrame()
        return load_table(self._con, table_name)

    def replace_table(self, table_name: str, df: pl.DataFrame) -> None:
        replace_table(ensure_connection(self._con), table_name, df)

    def is_connection_live(self) -> bool:
        return is_connection_live(self._con)

    def close(self) -> None:
        if self._con is None:
            return
        con, self._con = self._con, None
        try:
            con.close()
            logger.info("DuckDB connection closed")
        except duckdb.Error as exc:
            logger.warning("Error closing DuckDB connection: %s", exc)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
