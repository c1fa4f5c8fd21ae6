"""
Top-level Streamlit app package.

This package hosts the interactive grid editor (Streamlit) decoupled from the
gridstore.* library modules. All state and validation live in gridstore.editor;
the UI shell and its pure helpers live here.

CLI entrypoint (configured in pyproject.toml):
    gridstore-app = app.main:main
"""

from __future__ import annotations
