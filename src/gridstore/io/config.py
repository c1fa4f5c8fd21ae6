"""
Configuration for the gridstore.io module.

Defines StoreSettings, a frozen dataclass carrying the location of the backing table
and how to open it. The embedding application builds one per session (usually via
``StoreSettings.load()``) and hands it to ``DataStore.open``.

Precedence
- env (GRIDSTORE_*) > TOML (./gridstore.toml, then [tool.gridstore.store] in
  ./pyproject.toml) > defaults.

Notes
- Backends: "duckdb" (a single database file) and "parquet" (a directory holding
  one <table>.parquet file per table).
- Depends only on stdlib and gridstore.core.constants.
"""

from __future__ import annotations

import os
import re
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Literal

from gridstore.core.constants import DEFAULT_TABLE_NAME, TABLE_NAME_PATTERN

from .errors import StoreConfigError

Backend = Literal["duckdb", "parquet"]

_BACKENDS: tuple[str, ...] = ("duckdb", "parquet")


def _bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        return v.strip().lower() in {"1", "true", "t", "yes", "y", "on"}
    return False


def validate_table_name(name: str) -> str:
    """
    Ensure ``name`` is a plain SQL identifier.

    Raises:
        StoreConfigError: If the name could not be safely quoted into SQL or a file name.
    """
    if not isinstance(name, str) or not re.match(TABLE_NAME_PATTERN, name):
        raise StoreConfigError(f"invalid table name {name!r} (expected {TABLE_NAME_PATTERN})")
    return name


@dataclass(frozen=True)
class StoreSettings:
    """
    Runtime settings for a DataStore's backing table.

    Attributes:
        db_path (str): DuckDB database file (backend "duckdb") or root directory
            (backend "parquet").
        table_name (str): Name of the table to edit.
        backend (Literal["duckdb","parquet"]): Persistence backend.
        read_only (bool): Open the database read-only (save() will then fail).
        create_if_missing (bool): Create the database file/directory when absent.

    Examples:
        >>> from gridstore.io import StoreSettings
        >>> StoreSettings(db_path="data/mtcars.duckdb")  # doctest: +ELLIPSIS
        StoreSettings(...)
    """

    db_path: str = "data/mtcars.duckdb"
    table_name: str = DEFAULT_TABLE_NAME
    backend: Backend = "duckdb"
    read_only: bool = False
    create_if_missing: bool = False

    def __post_init__(self) -> None:
        validate_table_name(self.table_name)
        if self.backend not in _BACKENDS:
            raise StoreConfigError(
                f"unsupported backend {self.backend!r} (expected one of {', '.join(_BACKENDS)})"
            )

    @classmethod
    def _apply_mapping(cls, base: StoreSettings, cfg: dict[str, Any] | None) -> StoreSettings:
        """Apply a loose config mapping onto StoreSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base
        if "db_path" in cfg and isinstance(cfg["db_path"], str):
            s = replace(s, db_path=cfg["db_path"])
        if "table_name" in cfg and isinstance(cfg["table_name"], str):
            s = replace(s, table_name=cfg["table_name"])
        if "backend" in cfg and isinstance(cfg["backend"], str):
            s = replace(s, backend=cfg["backend"].strip().lower())  # type: ignore[arg-type]
        if "read_only" in cfg:
            s = replace(s, read_only=_bool(cfg["read_only"]))
        if "create_if_missing" in cfg:
            s = replace(s, create_if_missing=_bool(cfg["create_if_missing"]))
        return s

    @classmethod
    def from_env(cls, base: StoreSettings | None = None, prefix: str = "GRIDSTORE_") -> StoreSettings:
        """
        Build StoreSettings from environment variables. Precedence is env > base > defaults.

        Recognized variables:
            - GRIDSTORE_DB_PATH
            - GRIDSTORE_TABLE_NAME
            - GRIDSTORE_BACKEND ("duckdb" | "parquet")
            - GRIDSTORE_READ_ONLY (1/0/true/false/yes/no/on/off)
            - GRIDSTORE_CREATE_IF_MISSING
        """
        s = base or cls()
        mapping: dict[str, Any] = {}
        for key in ("db_path", "table_name", "backend", "read_only", "create_if_missing"):
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v
        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> StoreSettings:
        """
        Build StoreSettings from a TOML file.

        Search order when `path` is None:
            1) ./gridstore.toml (with either a top-level [store] table or direct keys)
            2) ./pyproject.toml under [tool.gridstore.store]

        Returns defaults if no file is present.
        """
        s = cls()

        def _load_toml(p: Path) -> dict[str, Any] | None:
            try:
                with p.open("rb") as fh:
                    return tomllib.load(fh)
            except (OSError, tomllib.TOMLDecodeError):
                return None

        cand: list[Path] = []
        if path is not None:
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / "gridstore.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        cfg: dict[str, Any] | None = None
        for p in cand:
            if not p.exists():
                continue
            data = _load_toml(p)
            if not isinstance(data, dict):
                continue
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("gridstore", {}).get("store", {}) if isinstance(tool, dict) else None
            elif "store" in data and isinstance(data["store"], dict):
                cfg = data["store"]
            else:
                cfg = data
            if cfg:
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> StoreSettings:
        """
        Load StoreSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults
                (gridstore.toml, pyproject.toml).

        Returns:
            StoreSettings
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s
