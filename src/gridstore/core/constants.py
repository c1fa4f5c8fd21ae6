"""
Gridstore core defaults.

Defines token sets and defaults consumed by coercion, validation and the IO layer.
This module is zero-IO and uses only the Python standard library.

Notes:
    - Boolean tokens are compared after ``str.strip().lower()``.
    - Row and column positions are 1-based at the store contract
      (``FIRST_ROW`` / ``FIRST_COLUMN``); grid-facing callers translate.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_TABLE_NAME",
    "FIRST_ROW",
    "FIRST_COLUMN",
    "BOOLEAN_TRUE_TOKENS",
    "BOOLEAN_FALSE_TOKENS",
    "TABLE_NAME_PATTERN",
    "FORMAT_VERSION",
]

# Table loaded when the embedding application does not configure one.
DEFAULT_TABLE_NAME: str = "mtcars"

# Index base used by DataStore.update_cell / DataStore.cell.
FIRST_ROW: int = 1
FIRST_COLUMN: int = 1

BOOLEAN_TRUE_TOKENS: frozenset[str] = frozenset({"true", "t", "yes", "y", "1"})
BOOLEAN_FALSE_TOKENS: frozenset[str] = frozenset({"false", "f", "no", "n", "0"})

# Table names are interpolated into SQL; restrict them to plain identifiers.
TABLE_NAME_PATTERN: str = r"^[A-Za-z_][A-Za-z0-9_]*$"

# Embedded in parquet key-value metadata by the file backend.
FORMAT_VERSION: str = "1"
