from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import polars as pl
import pytest

from gridstore.datasets import mtcars, seed
from gridstore.editor.store import DataStore
from gridstore.io.config import StoreSettings


class MemoryGateway:
    """In-memory TableGateway for tests that need dtypes or failures a database can't give."""

    def __init__(self, tables: dict[str, pl.DataFrame] | None = None) -> None:
        self.tables = {k: v.clone() for k, v in (tables or {}).items()}
        self.live = True
        self.close_calls = 0
        self.replace_calls = 0
        self.fail_replace: Exception | None = None
        self.fail_close: Exception | None = None

    def load_table(self, table_name: str) -> pl.DataFrame:
        return self.tables.get(table_name, pl.DataFrame()).clone()

    def replace_table(self, table_name: str, df: pl.DataFrame) -> None:
        self.replace_calls += 1
        if self.fail_replace is not None:
            raise self.fail_replace
        self.tables[table_name] = df.clone()

    def is_connection_live(self) -> bool:
        return self.live

    def close(self) -> None:
        self.close_calls += 1
        self.live = False
        if self.fail_close is not None:
            raise self.fail_close


@pytest.fixture
def mtcars_df() -> pl.DataFrame:
    return mtcars()


@pytest.fixture
def all_types_df() -> pl.DataFrame:
    """One column per ColumnType, with nulls, plus a Categorical and a quoted level."""
    return pl.DataFrame(
        {
            "name": ["Mazda RX4", "Valiant", None, "Volvo 142E"],
            "mpg": [21.0, None, 18.7, 21.4],
            "hp": pl.Series([110, 105, None, 109], dtype=pl.Int64),
            "am": [True, False, None, True],
            "cyl": pl.Series(["6", "6", "8", None], dtype=pl.Enum(["4", "6", "8"])),
            "trim": pl.Series(
                ["driver's", "base", None, "base"], dtype=pl.Enum(["base", "driver's"])
            ),
            "origin": pl.Series(["JP", "US", "US", None], dtype=pl.Categorical),
        }
    )


@pytest.fixture
def mtcars_settings(tmp_path: Path) -> StoreSettings:
    """DuckDB file under tmp_path seeded with the 32 x 12 demo table."""
    settings = StoreSettings(db_path=str(tmp_path / "mtcars.duckdb"), table_name="mtcars")
    seed(settings)
    return settings


@pytest.fixture
def store(mtcars_settings: StoreSettings) -> Iterator[DataStore]:
    s = DataStore.open(mtcars_settings)
    yield s
    s.close()


@pytest.fixture
def memory_gateway_factory():
    return MemoryGateway
