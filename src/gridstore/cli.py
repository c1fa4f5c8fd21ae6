from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import replace
from typing import Any

from gridstore.core.errors import GridStoreError
from gridstore.core.summary import Summary
from gridstore.datasets import seed
from gridstore.editor.store import DataStore
from gridstore.io.config import StoreSettings

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _configure_logging(level: str | None) -> None:
    """Configure root logging from ``--log-level`` or GRIDSTORE_LOG_LEVEL (default WARNING)."""
    name = (level or os.environ.get("GRIDSTORE_LOG_LEVEL") or "WARNING").upper()
    if name not in _LOG_LEVELS:
        name = "WARNING"
    logging.basicConfig(
        level=getattr(logging, name),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _add_store_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--db", dest="db_path", type=str, default=None, help="Database file or parquet root.")
    p.add_argument("--table", dest="table_name", type=str, default=None, help="Table name.")
    p.add_argument(
        "--backend", choices=("duckdb", "parquet"), default=None, help="Persistence backend."
    )
    p.add_argument(
        "--log-level",
        type=str.upper,
        choices=_LOG_LEVELS,
        default=None,
        help="Logging level (default: GRIDSTORE_LOG_LEVEL or WARNING).",
    )


def _settings_from_args(args: argparse.Namespace, **overrides: Any) -> StoreSettings:
    """StoreSettings.load() with command-line flags taking precedence."""
    s = StoreSettings.load()
    for key in ("db_path", "table_name", "backend"):
        value = getattr(args, key, None)
        if value is not None:
            overrides[key] = value
    return replace(s, **overrides)


def _parse_column(raw: str) -> str | int:
    return int(raw) if raw.isdigit() else raw


def _print_summary(summary: Summary) -> None:
    print(summary.message)
    if summary.numeric_means:
        for name, mean in summary.numeric_means.items():
            print(f"  mean({name}) = {mean:.4f}" if mean is not None else f"  mean({name}) = NA")


def _cmd_seed(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="gridstore seed", description="Write the demo mtcars table.")
    _add_store_args(p)
    p.add_argument("--force", action="store_true", help="Replace an existing database/table.")
    args = p.parse_args(argv)
    _configure_logging(args.log_level)

    try:
        settings = _settings_from_args(args)
    except GridStoreError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 2
    target = (
        os.path.join(settings.db_path, f"{settings.table_name}.parquet")
        if settings.backend == "parquet"
        else settings.db_path
    )
    if os.path.exists(target) and not args.force:
        print(f"[ERROR] {target} already exists (use --force to replace)", file=sys.stderr)
        return 1
    try:
        df = seed(settings)
    except GridStoreError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    print(f"[INFO] Seeded {settings.table_name!r}: {df.height} rows x {df.width} columns -> {target}")
    return 0


def _cmd_summary(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="gridstore summary", description="Print the table summary.")
    _add_store_args(p)
    args = p.parse_args(argv)
    _configure_logging(args.log_level)

    try:
        with DataStore.open(_settings_from_args(args, read_only=True)) as store:
            summary = store.summary()
    except GridStoreError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    _print_summary(summary)
    return 0


def _cmd_set(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="gridstore set", description="Update one cell (1-based row) and optionally save."
    )
    _add_store_args(p)
    p.add_argument("row", type=int, help="1-based row index.")
    p.add_argument("column", type=str, help="Column name or 1-based column position.")
    p.add_argument("value", type=str, help="New value (coerced to the column type).")
    p.add_argument("--save", action="store_true", help="Persist the change.")
    args = p.parse_args(argv)
    _configure_logging(args.log_level)

    try:
        with DataStore.open(_settings_from_args(args, read_only=not args.save)) as store:
            store.update_cell(args.row, _parse_column(args.column), args.value)
            value = store.cell(args.row, _parse_column(args.column))
            if args.save:
                store.save()
    except GridStoreError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    state = "saved" if args.save else "not saved"
    print(f"[INFO] row {args.row}, column {args.column!r} = {value!r} ({state})")
    return 0


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="gridstore", description="Editable table store utilities.")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("seed")
    sub.add_parser("summary")
    sub.add_parser("set")
    return p


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        build_argparser().print_help()
        return
    cmd, rest = argv[0], argv[1:]
    if cmd == "seed":
        code = _cmd_seed(rest)
    elif cmd == "summary":
        code = _cmd_summary(rest)
    elif cmd == "set":
        code = _cmd_set(rest)
    else:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        code = 2
    raise SystemExit(code)


if __name__ == "__main__":
    main()
