"""
DataStore: the single source of truth for an editable table.

The store owns two snapshots of one backing table:
- ``original``: the baseline (last loaded or last saved). Never mutated in place; only
  replaced wholesale on initialize and after a successful save.
- ``working``: the copy the user edits, one validated cell at a time.

State machine
- clean (modified count == 0): working equals original.
- dirty (modified count > 0): at least one successful update_cell since the last
  save/revert.

Operations
- update_cell(row, column, value): validate -> coerce -> replace one cell -> count.
- revert(): working <- copy of original; count = 0. Never touches the backing store.
- save(): check connection and structure, replace the backing table, promote
  working to original; count = 0.
- summary(): cached while clean, recomputed otherwise.

Failure semantics
- Every public operation raises a GridStoreError subclass whose ``summary`` names the
  operation ("Save operation failed", ...) and whose ``__cause__`` is the underlying
  exception when one was wrapped. State is untouched on failure.

Indexing
- Rows and positional columns are 1-based here. Grid-facing code (EditorSession)
  translates 0-based grid coordinates.

Concurrency
- All public operations take one re-entrant lock, so reads never interleave with a
  mutation. The store never suspends; only gateway IO blocks.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Self

import polars as pl

from gridstore.core.coerce import coerce_for_spec
from gridstore.core.constants import DEFAULT_TABLE_NAME, FIRST_ROW
from gridstore.core.errors import GridStoreError, StructuralError
from gridstore.core.summary import Summary, SummaryCache, compute_summary
from gridstore.core.types import ColumnSpec, TableSchema
from gridstore.core.validate import (
    ensure_rows,
    ensure_table,
    precheck_type,
    reject_empty_input,
    resolve_column,
    validate_no_silent_loss,
    validate_row_index,
    validate_save_structure,
)
from gridstore.io.config import StoreSettings, validate_table_name
from gridstore.io.errors import PersistenceError, StoreConnectionError
from gridstore.io.gateway import TableGateway, open_gateway

__all__ = ["DataStore"]

logger = logging.getLogger(__name__)


def _set_cell(df: pl.DataFrame, offset: int, spec: ColumnSpec, value: Any) -> pl.DataFrame:
    """Return a new frame with row ``offset`` (0-based) of ``spec.name`` set to ``value``."""
    return df.with_columns(
        pl.when(pl.int_range(pl.len()) == offset)
        .then(pl.lit(value).cast(spec.dtype))
        .otherwise(pl.col(spec.name))
        .cast(spec.dtype)
        .alias(spec.name)
    )


class DataStore:
    """
    Mutable working copy of a backing table with an immutable baseline.

    Usage:
        with DataStore.open(StoreSettings(db_path="data/mtcars.duckdb")) as store:
            store.update_cell(1, "mpg", 22.5)
            store.save()

    Notes:
        - The store takes ownership of ``gateway`` and closes it in ``close()``, and
          also when construction fails.
        - ``original`` and ``working`` return independent copies; mutating them never
          affects the store.
    """

    def __init__(
        self,
        gateway: TableGateway,
        table_name: str = DEFAULT_TABLE_NAME,
        *,
        allow_empty: bool = False,
    ) -> None:
        """
        Load ``table_name`` through ``gateway`` into both snapshots.

        Args:
            gateway (TableGateway): Open gateway; owned by the store from here on.
            table_name (str): Table to edit.
            allow_empty (bool): Accept a table that could not be loaded (empty frame)
                instead of failing.

        Raises:
            GridStoreError: Initialization failed; the gateway has been closed.
        """
        self._gateway = gateway
        self._lock = threading.RLock()
        self._original = pl.DataFrame()
        self._working = pl.DataFrame()
        self._schema = TableSchema(columns=())
        self._modified = 0
        self._cache = SummaryCache()
        self._closed = False
        try:
            self._table_name = validate_table_name(table_name)
            self.initialize(allow_empty=allow_empty)
        except Exception:
            try:
                self.close()
            except Exception as close_exc:
                # The initialization error propagates, not this one.
                logger.warning(
                    "Closing the gateway after failed initialization of %r failed: %s",
                    table_name,
                    close_exc,
                )
            raise

    @classmethod
    def open(cls, settings: StoreSettings, *, allow_empty: bool = False) -> DataStore:
        """
        Open the configured backend and load its table.

        Raises:
            StoreConnectionError: The backing store could not be opened.
            GridStoreError: Initialization failed (the connection is released).
        """
        try:
            gateway = open_gateway(settings)
        except GridStoreError as exc:
            raise exc.annotate("DataStore initialization failed", db_path=settings.db_path)
        return cls(gateway, settings.table_name, allow_empty=allow_empty)

    # ---------------------------------------------------------------------
    # Failure normalization
    # ---------------------------------------------------------------------
    @contextmanager
    def _operation(
        self,
        summary: str,
        fallback: type[GridStoreError] = StructuralError,
        **context: Any,
    ) -> Iterator[None]:
        with self._lock:
            try:
                yield
            except GridStoreError as exc:
                raise exc.annotate(summary, **context)
            except Exception as exc:
                raise fallback(str(exc), summary=summary, context=context) from exc

    # ---------------------------------------------------------------------
    # Views
    # ---------------------------------------------------------------------
    @property
    def table_name(self) -> str:
        return self._table_name

    @property
    def schema(self) -> TableSchema:
        """Declared column types, read from the baseline."""
        return self._schema

    @property
    def original(self) -> pl.DataFrame:
        """Independent copy of the baseline snapshot."""
        with self._lock:
            return self._original.clone()

    @property
    def working(self) -> pl.DataFrame:
        """Independent copy of the working snapshot."""
        with self._lock:
            return self._working.clone()

    @property
    def is_dirty(self) -> bool:
        return self.get_modified_count() > 0

    @property
    def closed(self) -> bool:
        return self._closed

    def get_modified_count(self) -> int:
        """Number of successful update_cell calls since the last save/revert."""
        with self._lock:
            return self._modified

    def distinct_modified_cells(self) -> int:
        """
        Number of cells whose working value differs from the baseline.

        Unlike get_modified_count, editing the same cell twice counts once, and
        editing a cell back to its baseline value counts zero.

        Raises:
            StructuralError: If working no longer matches the baseline structure.
        """
        with self._operation("Failed to compare with original"):
            validate_save_structure(self._working, self._original, self._schema)
            return sum(
                int(self._working.get_column(c).ne_missing(self._original.get_column(c)).sum())
                for c in self._schema.names
            )

    def cell(self, row: Any, column: Any) -> Any:
        """Read one working value (1-based row, column name or 1-based position)."""
        with self._operation("Failed to read cell", row=row, column=column):
            working = ensure_table(self._working)
            idx = validate_row_index(row, working)
            name = resolve_column(column, working)
            return working.get_column(name)[idx - FIRST_ROW]

    # ---------------------------------------------------------------------
    # Operations
    # ---------------------------------------------------------------------
    def initialize(self, *, allow_empty: bool = False) -> None:
        """
        (Re)load the table from the backing store into both snapshots.

        Raises:
            StructuralError: The table is empty/unreadable (and ``allow_empty`` is
                False) or has a column type gridstore cannot edit.
        """
        with self._operation(
            "DataStore initialization failed", PersistenceError, table=self._table_name
        ):
            loaded = self._gateway.load_table(self._table_name)
            if loaded.width == 0 and not allow_empty:
                raise StructuralError(
                    f"table {self._table_name!r} could not be loaded or has no columns"
                )
            schema = TableSchema.from_frame(loaded)
            self._original = loaded.clone()
            self._working = loaded.clone()
            self._schema = schema
            self._modified = 0
            self._cache.invalidate()
            logger.info(
                "DataStore initialized: %d rows loaded from %r", loaded.height, self._table_name
            )

    def update_cell(self, row: Any, column: Any, value: Any) -> None:
        """
        Type-safe single-cell update of the working copy.

        Args:
            row (int): 1-based row index.
            column (str | int): Column name, or 1-based column position.
            value: New value; coerced toward the column's baseline type.

        Raises:
            StructuralError: No data, row/column out of bounds, or unknown column.
            CoercionError: Empty input, or value incompatible with the column type.
            DataLossError: Coercion would turn the input into a missing value.

        Examples:
            >>> store.update_cell(1, "mpg", 22.5)  # doctest: +SKIP
            >>> store.update_cell(2, 4, "120")  # 4th column, by position  # doctest: +SKIP
        """
        with self._operation("Update failed", row=row, column=column, value=value):
            working = ensure_table(self._working)
            idx = validate_row_index(row, working)
            name = resolve_column(column, working)
            spec = self._schema.get(name)
            reject_empty_input(value, spec)
            precheck_type(value, spec)
            coerced = coerce_for_spec(value, spec)
            validate_no_silent_loss(coerced, value, name)

            self._working = _set_cell(working, idx - FIRST_ROW, spec, coerced)
            self._modified += 1
            self._cache.invalidate()
            logger.debug("Cell updated: row %d, column %r, value %r", idx, name, coerced)

    def revert(self) -> None:
        """
        Reset the working copy to the baseline. Does not touch the backing store.

        Raises:
            StructuralError: If the baseline is not a table.
        """
        with self._operation("Revert operation failed"):
            if not isinstance(self._original, pl.DataFrame):
                raise StructuralError("original snapshot is not a table")
            self._working = self._original.clone()
            self._modified = 0
            self._cache.invalidate()
            logger.info("Data reverted to original state (%d rows)", self._working.height)

    def save(self) -> None:
        """
        Persist the working copy (full replace) and promote it to the new baseline.

        Raises:
            StoreConnectionError: The backing connection is closed or broken.
            StructuralError: Working is empty or no longer matches the baseline
                (columns, order, dtypes, row count).
            PersistenceError: The backing store rejected the write.
        """
        with self._operation("Save operation failed", PersistenceError, table=self._table_name):
            if not self._gateway.is_connection_live():
                raise StoreConnectionError("connection is not valid (closed or broken)")
            working = ensure_rows(self._working)
            validate_save_structure(working, self._original, self._schema)
            self._gateway.replace_table(self._table_name, working)

            self._original = working.clone()
            self._modified = 0
            logger.info("Data saved: %d rows written to %r", working.height, self._table_name)

    def summary(self) -> Summary:
        """
        Summary of the working copy; served from cache while the store is clean.

        Raises:
            StructuralError: If no non-empty table is loaded.
        """
        with self._operation("Failed to generate summary"):
            cached = self._cache.get(self._modified)
            if cached is not None:
                return cached
            result = compute_summary(self._working)
            self._cache.put(result, self._modified)
            logger.info("Summary generated for %d x %d dataset", result.rows, result.cols)
            return result

    # ---------------------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------------------
    def close(self) -> None:
        """Release the backing connection. Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._gateway.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
