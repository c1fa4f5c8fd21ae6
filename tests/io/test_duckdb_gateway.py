from __future__ import annotations

from pathlib import Path

import polars as pl
import pytest
from polars.testing import assert_frame_equal

from gridstore.core.types import ColumnType, TableSchema
from gridstore.io.db import DuckDbGateway, ensure_connection, is_connection_live
from gridstore.io.errors import PersistenceError, StoreConnectionError
from gridstore.io.gateway import TableGateway


def test_open_missing_file_requires_create_flag(tmp_path: Path) -> None:
    db = tmp_path / "nested" / "cars.duckdb"
    with pytest.raises(StoreConnectionError):
        DuckDbGateway.open(str(db))

    with DuckDbGateway.open(str(db), create_if_missing=True) as gw:
        assert isinstance(gw, TableGateway)
        assert gw.is_connection_live()
    assert db.exists()


def test_replace_then_load_round_trips_types_and_order(tmp_path: Path, mtcars_df) -> None:
    with DuckDbGateway.open(str(tmp_path / "cars.duckdb"), create_if_missing=True) as gw:
        gw.replace_table("mtcars", mtcars_df)
        loaded = gw.load_table("mtcars")

    assert_frame_equal(loaded, mtcars_df)


def test_replace_discards_previous_rows(tmp_path: Path, mtcars_df) -> None:
    with DuckDbGateway.open(str(tmp_path / "cars.duckdb"), create_if_missing=True) as gw:
        gw.replace_table("mtcars", mtcars_df)
        gw.replace_table("mtcars", mtcars_df.head(3))
        assert gw.load_table("mtcars").height == 3


def test_load_missing_table_returns_empty_frame(tmp_path: Path) -> None:
    with DuckDbGateway.open(str(tmp_path / "cars.duckdb"), create_if_missing=True) as gw:
        df = gw.load_table("nope")
    assert isinstance(df, pl.DataFrame)
    assert df.width == 0


def test_close_is_idempotent_and_kills_liveness(tmp_path: Path, mtcars_df) -> None:
    gw = DuckDbGateway.open(str(tmp_path / "cars.duckdb"), create_if_missing=True)
    con = gw.connection
    gw.close()
    gw.close()

    assert not gw.is_connection_live()
    assert not is_connection_live(con)
    assert gw.load_table("mtcars").width == 0
    with pytest.raises(StoreConnectionError):
        gw.replace_table("mtcars", mtcars_df)


def test_ensure_connection_rejects_non_connections() -> None:
    with pytest.raises(StoreConnectionError, match="None"):
        ensure_connection(None)
    with pytest.raises(StoreConnectionError, match="not a valid DuckDB connection"):
        ensure_connection(object())


def test_read_only_write_is_persistence_error_and_keeps_table(
    mtcars_settings, mtcars_df
) -> None:
    with DuckDbGateway.open(mtcars_settings.db_path, read_only=True) as gw:
        with pytest.raises(PersistenceError) as ei:
            gw.replace_table("mtcars", mtcars_df.head(1))
        assert ei.value.context["table"] == "mtcars"
        assert gw.load_table("mtcars").height == 32


def test_every_column_type_survives_a_round_trip(tmp_path: Path, all_types_df) -> None:
    db = str(tmp_path / "cars.duckdb")
    with DuckDbGateway.open(db, create_if_missing=True) as gw:
        gw.replace_table("cars", all_types_df)

    with DuckDbGateway.open(db, read_only=True) as gw:
        loaded = gw.load_table("cars")

    assert loaded.schema == all_types_df.schema
    assert_frame_equal(loaded, all_types_df, categorical_as_str=True)
    assert TableSchema.from_frame(loaded) == TableSchema.from_frame(all_types_df)
    assert TableSchema.from_frame(loaded).get("cyl").type is ColumnType.CATEGORICAL


def test_categorical_columns_are_stored_as_enums(tmp_path: Path, all_types_df) -> None:
    with DuckDbGateway.open(str(tmp_path / "cars.duckdb"), create_if_missing=True) as gw:
        gw.replace_table("cars", all_types_df)
        types = {row[0]: row[1] for row in gw.connection.execute('DESCRIBE "cars"').fetchall()}

    assert types["cyl"].startswith("ENUM(")
    assert types["origin"].startswith("ENUM(")
    assert types["name"] == "VARCHAR"


def test_replacing_without_categoricals_forgets_their_kinds(
    tmp_path: Path, all_types_df
) -> None:
    plain = all_types_df.with_columns(pl.col("cyl").cast(pl.String))
    with DuckDbGateway.open(str(tmp_path / "cars.duckdb"), create_if_missing=True) as gw:
        gw.replace_table("cars", all_types_df)
        gw.replace_table("cars", plain.select("name", "cyl"))
        loaded = gw.load_table("cars")

    assert loaded.schema["cyl"] == pl.String


def test_create_under_a_file_is_connection_error(tmp_path: Path) -> None:
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x")
    with pytest.raises(StoreConnectionError, match="cannot create database directory") as ei:
        DuckDbGateway.open(str(blocker / "sub" / "cars.duckdb"), create_if_missing=True)
    assert ei.value.context["db_path"].endswith("cars.duckdb")
    assert isinstance(ei.value.__cause__, OSError)
