"""
gridstore app UI package.

Modules:
    - app: Streamlit page (grid, Save/Revert, summary panel) via streamlit_app.
    - helpers: Pure helpers translating widget state into EditorSession calls.

Usage:
    from app.ui import streamlit_app
    streamlit_app(db_path="data/mtcars.duckdb", table_name="mtcars")
"""

from __future__ import annotations

from .app import streamlit_app

__all__ = [
    "streamlit_app",
]
