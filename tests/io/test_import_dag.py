from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import pytest

SRC = Path(__file__).resolve().parents[2] / "src"


@pytest.mark.parametrize(
    ("module", "forbidden"),
    [
        ("gridstore.core", ["gridstore.io", "gridstore.editor", "app", "duckdb"]),
        ("gridstore.io", ["gridstore.editor", "app"]),
        ("gridstore.editor", ["app", "streamlit"]),
    ],
)
def test_import_dag_no_side_imports(module: str, forbidden: list[str]) -> None:
    # Run in a clean Python process to avoid pollution from other tests
    code = f"""
import sys
import {module}  # noqa: F401

forbidden = {forbidden!r}
present = [m for m in forbidden if m in sys.modules]
print(",".join(present))
"""
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC), env.get("PYTHONPATH")]))
    proc = subprocess.run(
        [sys.executable, "-c", code], capture_output=True, text=True, check=True, env=env
    )
    assert proc.stdout.strip() == ""
