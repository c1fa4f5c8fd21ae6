"""
gridstore App entrypoint.

This module provides the CLI entrypoint to launch the Streamlit UI. It defers
all UI composition to the app.ui package and exists solely to start Streamlit
programmatically or render directly when already running under Streamlit.

A ``.env`` file in the working directory is loaded (without overriding existing
variables) before settings are read, so GRIDSTORE_* variables can live there.

Usage:
    - Python execution (hands process to Streamlit):
        uv run python -m app.main --db data/mtcars.duckdb --table mtcars

    - Streamlit direct:
        streamlit run src/app/main.py -- --db data/mtcars.duckdb --table mtcars
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from app.ui import streamlit_app


def _build_parser(**kwargs: object) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="gridstore Streamlit App", **kwargs)  # type: ignore[arg-type]
    parser.add_argument("--db", default=None, help="Database file (or parquet root directory).")
    parser.add_argument("--table", default=None, help="Table to edit.")
    parser.add_argument("--backend", choices=("duckdb", "parquet"), default=None)
    return parser


def main(argv: list[str] | None = None) -> None:
    """Console entrypoint that launches Streamlit with the gridstore UI.

    If already executing within a Streamlit server (environment variable
    STREAMLIT_SERVER_PORT is set), this function renders the app directly.
    Otherwise, it execs "python -m streamlit run <this_module>" to leverage
    Streamlit's reloader and argument parsing, passing through any supported
    options after "--".

    Args:
        argv (list[str] | None): Optional list of CLI arguments. If None,
            sys.argv[1:] is used.

    Examples:
        uv run python -m app.main --db data/mtcars.duckdb
        streamlit run src/app/main.py -- --db data/mtcars.duckdb --table mtcars
    """
    args = list(sys.argv[1:] if argv is None else argv)
    ns = _build_parser().parse_args(args)

    # If invoked within Streamlit, just render
    if os.environ.get("STREAMLIT_SERVER_PORT"):
        load_dotenv(override=False)
        streamlit_app(db_path=ns.db, table_name=ns.table, backend=ns.backend)
        return

    # Otherwise, exec streamlit run on this module to take over the process
    app_path = Path(__file__).resolve()
    cmd = [sys.executable, "-m", "streamlit", "run", str(app_path)]

    passthrough: list[str] = []
    if ns.db:
        passthrough += ["--db", ns.db]
    if ns.table:
        passthrough += ["--table", ns.table]
    if ns.backend:
        passthrough += ["--backend", ns.backend]
    if passthrough:
        cmd += ["--"] + passthrough

    os.execv(sys.executable, cmd)


if __name__ == "__main__":
    # Support: --db, --table, --backend after '--' when using `streamlit run`
    load_dotenv(override=False)
    ns, _ = _build_parser(add_help=False).parse_known_args(sys.argv[1:])
    streamlit_app(db_path=ns.db, table_name=ns.table, backend=ns.backend)
