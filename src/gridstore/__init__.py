"""
gridstore: an editable, type-safe table store with a grid editor front end.

A DataStore loads one table from a backing store (DuckDB or parquet) into an
immutable baseline and a working copy, validates and coerces single-cell edits
against the baseline column types, and persists the working copy on save.

## Packages
- gridstore.core: column types, coercion, validation, summary, error taxonomy.
- gridstore.io: persistence gateway contract, DuckDB and parquet backends, settings.
- gridstore.editor: DataStore and the session-scoped EditorSession.
- gridstore.datasets: the bundled mtcars demo table.
- gridstore.cli: ``gridstore seed|summary|set``.

Importing ``gridstore`` itself loads none of these, so ``import gridstore.core``
stays free of IO dependencies.

## Examples
```python
from gridstore.editor import DataStore
from gridstore.io import StoreSettings

with DataStore.open(StoreSettings(db_path="data/mtcars.duckdb")) as store:
    store.update_cell(1, "mpg", 22.5)
    print(store.summary().message)
    store.save()
```
"""

__version__ = "0.1.0"
