"""
gridstore.io: persistence layer for the editable table.

## Responsibilities
- Define the TableGateway contract the DataStore consumes (load, replace, liveness, close).
- Provide two backends: DuckDB (one database file) and parquet (one file per table,
  atomic tmp -> fsync -> rename writes).
- Carry store configuration (StoreSettings) with env > TOML > defaults precedence.

## Public API
- StoreSettings: where the backing table lives and how to open it.
- TableGateway, open_gateway: contract and backend factory.
- DuckDbGateway, ParquetGateway: concrete backends.
- StoreConnectionError, PersistenceError, StoreConfigError: IO-layer errors.

## Import DAG discipline
- Depends only on stdlib, polars/pyarrow/duckdb and gridstore.core.
- MUST NOT import gridstore.editor or app.

## Examples
```python
from gridstore.io import StoreSettings, open_gateway

gw = open_gateway(StoreSettings(db_path="data/mtcars.duckdb"))
df = gw.load_table("mtcars")
gw.close()
```
"""

from __future__ import annotations

from .config import StoreSettings
from .db import DuckDbGateway
from .errors import PersistenceError, StoreConfigError, StoreConnectionError
from .gateway import TableGateway, open_gateway
from .parquet import ParquetGateway

__all__ = [
    "StoreSettings",
    "TableGateway",
    "open_gateway",
    "DuckDbGateway",
    "ParquetGateway",
    "StoreConnectionError",
    "PersistenceError",
    "StoreConfigError",
]
