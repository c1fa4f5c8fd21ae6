from __future__ import annotations

from pathlib import Path

import pytest

from gridstore.io.config import StoreSettings
from gridstore.io.errors import StoreConfigError

_ENV_KEYS = [
    "GRIDSTORE_DB_PATH",
    "GRIDSTORE_TABLE_NAME",
    "GRIDSTORE_BACKEND",
    "GRIDSTORE_READ_ONLY",
    "GRIDSTORE_CREATE_IF_MISSING",
]


def _clear_env(monkeypatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def _write_gridstore_toml(tmp: Path, content: str) -> Path:
    p = tmp / "gridstore.toml"
    p.write_text(content)
    return p


def test_store_settings_precedence_env_over_toml(tmp_path: Path, monkeypatch) -> None:
    # Arrange TOML
    _write_gridstore_toml(
        tmp_path,
        """
        [store]
        db_path = "toml.duckdb"
        table_name = "cars_toml"
        backend = "parquet"
        """.strip(),
    )
    # Ensure cwd for StoreSettings.from_toml() search
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)
    # Arrange ENV that should override TOML
    monkeypatch.setenv("GRIDSTORE_DB_PATH", "env.duckdb")
    monkeypatch.setenv("GRIDSTORE_BACKEND", "duckdb")
    monkeypatch.setenv("GRIDSTORE_READ_ONLY", "yes")

    s = StoreSettings.load()

    assert s.db_path == "env.duckdb"  # env override
    assert s.backend == "duckdb"  # env override
    assert s.read_only is True
    assert s.table_name == "cars_toml"  # TOML preserved where env is silent


def test_store_settings_from_toml_top_level_keys(tmp_path: Path, monkeypatch) -> None:
    _write_gridstore_toml(
        tmp_path,
        """
        db_path = "data/cars"
        backend = "parquet"
        create_if_missing = true
        """.strip(),
    )
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)

    s = StoreSettings.load()

    assert s.db_path == "data/cars"
    assert s.backend == "parquet"
    assert s.create_if_missing is True
    assert s.table_name == "mtcars"


def test_store_settings_from_pyproject_tool_table(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "pyproject.toml").write_text(
        """
        [tool.gridstore.store]
        db_path = "pp.duckdb"
        table_name = "fleet"
        """.strip()
    )
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)

    s = StoreSettings.load()

    assert s.db_path == "pp.duckdb"
    assert s.table_name == "fleet"


def test_store_settings_defaults_when_no_config(tmp_path: Path, monkeypatch) -> None:
    # No TOML, no env
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)

    s = StoreSettings.load()

    assert s.db_path == "data/mtcars.duckdb"
    assert s.table_name == "mtcars"
    assert s.backend == "duckdb"
    assert s.read_only is False
    assert s.create_if_missing is False


def test_store_settings_reject_bad_values() -> None:
    with pytest.raises(StoreConfigError):
        StoreSettings(table_name="mtcars; DROP TABLE x")
    with pytest.raises(StoreConfigError):
        StoreSettings(backend="sqlite")  # type: ignore[arg-type]
