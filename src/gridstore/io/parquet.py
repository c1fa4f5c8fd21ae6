"""
Parquet-file backend for the persistence gateway.

Layout
- One file per table: <root_dir>/<table_name>.parquet

Write path
- Convert to Arrow, embed table-name/format-version key-value metadata, write to a
  tmp file beside the destination, fsync, then os.replace(tmp, final). A failure at
  any step removes the tmp file and leaves the previous table file untouched.

Notes
- "Connection" here is the root directory: live while the gateway is open and the
  directory exists.
- Single-writer semantics; no inter-process locking.
"""

from __future__ import annotations

import logging
import os
import uuid
from typing import Any, Self

import polars as pl
import pyarrow as pa
import pyarrow.parquet as pq

from gridstore.core.constants import FORMAT_VERSION

from .config import validate_table_name
from .errors import PersistenceError, StoreConnectionError
from .fs import fsync_path, is_writable_dir, makedirs, remove_if_exists, rename_atomic

logger = logging.getLogger(__name__)


class ParquetGateway:
    """TableGateway storing each table as a single parquet file under ``root_dir``."""

    def __init__(
        self,
        root_dir: str,
        *,
        read_only: bool = False,
        create_if_missing: bool = False,
    ) -> None:
        if not os.path.isdir(root_dir):
            if not create_if_missing or read_only:
                raise StoreConnectionError(
                    f"parquet root directory {root_dir!r} not found",
                    context={"db_path": root_dir},
                )
            try:
                makedirs(root_dir, exist_ok=True)
            except OSError as exc:
                raise StoreConnectionError(
                    f"cannot create parquet root directory {root_dir!r}: {exc}",
                    context={"db_path": root_dir},
                ) from exc
        if not read_only and not is_writable_dir(root_dir):
            raise StoreConnectionError(
                f"parquet root directory {root_dir!r} is not writable",
                context={"db_path": root_dir},
            )
        self.root_dir = root_dir
        self.read_only = read_only
        self._closed = False

    def table_path(self, table_name: str) -> str:
        return os.path.join(self.root_dir, f"{validate_table_name(table_name)}.parquet")

    def load_table(self, table_name: str) -> pl.DataFrame:
        path = self.table_path(table_name)
        try:
            return pl.read_parquet(path)
        except (OSError, pl.exceptions.PolarsError, pa.ArrowException) as exc:
            logger.warning(
                "Failed to load table %r from %s, initializing with empty dataset: %s",
                table_name,
                path,
                exc,
            )
            return pl.DataFrame()

    def replace_table(self, table_name: str, df: pl.DataFrame) -> None:
        if not self.is_connection_live():
            raise StoreConnectionError(
                f"parquet root directory {self.root_dir!r} is closed or missing"
            )
        if self.read_only:
            raise PersistenceError(
                f"cannot replace table {table_name!r}: gateway opened read-only",
                context={"table": table_name},
            )
        final_path = self.table_path(table_name)
        tmp_path = f"{final_path}.{uuid.uuid4().hex}.tmp"
        try:
            arrow_table = df.to_arrow()
            meta = dict(arrow_table.schema.metadata or {})
            meta.update(
                {
                    b"gridstore_table_name": table_name.encode("utf-8"),
                    b"gridstore_format_version": FORMAT_VERSION.encode("utf-8"),
                }
            )
            arrow_table = arrow_table.replace_schema_metadata(meta)
            pq.write_table(arrow_table, tmp_path)
            fsync_path(tmp_path)
            rename_atomic(tmp_path, final_path)
        except (OSError, pa.ArrowException, pl.exceptions.PolarsError) as exc:
            remove_if_exists(tmp_path)
            raise PersistenceError(
                f"failed to write {df.height} rows x {df.width} columns to {final_path!r}: {exc}",
                context={"table": table_name, "rows": df.height, "cols": df.width},
            ) from exc

    def is_connection_live(self) -> bool:
        return not self._closed and os.path.isdir(self.root_dir)

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
