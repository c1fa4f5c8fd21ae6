from __future__ import annotations

import os
from pathlib import Path

import pytest

from app import main as app_main


def test_main_renders_inline(monkeypatch, tmp_path) -> None:
    called = {}

    def fake_streamlit_app(*, db_path=None, table_name=None, backend=None):
        called["db_path"] = db_path
        called["table_name"] = table_name
        called["backend"] = backend

    monkeypatch.setenv("STREAMLIT_SERVER_PORT", "1")
    # Patch the imported symbols used inside app.main (not the package attribute)
    monkeypatch.setattr(app_main, "streamlit_app", fake_streamlit_app, raising=True)
    monkeypatch.setattr(app_main, "load_dotenv", lambda **_: False, raising=True)

    db = str(tmp_path / "cars.duckdb")
    app_main.main(["--db", db, "--table", "fleet"])

    assert called == {"db_path": db, "table_name": "fleet", "backend": None}


def test_main_execs_streamlit(monkeypatch, tmp_path) -> None:
    # Ensure not in Streamlit context
    monkeypatch.delenv("STREAMLIT_SERVER_PORT", raising=False)

    captured = {}

    def fake_execv(exe: str, cmd: list[str]) -> None:
        captured["exe"] = exe
        captured["cmd"] = cmd
        # Prevent process handoff
        raise SystemExit

    monkeypatch.setattr(os, "execv", fake_execv, raising=True)

    db = str(tmp_path / "cars.duckdb")
    with pytest.raises(SystemExit):
        app_main.main(["--db", db, "--backend", "duckdb"])

    assert captured["cmd"][0] == captured["exe"]
    # Assert we launch `python -m streamlit run <path>`
    assert captured["cmd"][1:4] == ["-m", "streamlit", "run"]
    expected_main_path = str(Path(app_main.__file__).resolve())
    assert captured["cmd"][4] == expected_main_path
    # Passthrough args present after `--`
    dashdash_idx = captured["cmd"].index("--")
    assert captured["cmd"][dashdash_idx + 1 :] == ["--db", db, "--backend", "duckdb"]
