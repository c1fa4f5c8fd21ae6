"""
gridstore.editor: the data store and its session wrapper.

## Public API
- DataStore: baseline/working snapshots, validated single-cell updates, revert,
  save, cached summary.
- EditorSession: session-scoped owner of one DataStore; translates 0-based grid
  coordinates and returns Outcome values instead of raising.

## Import DAG discipline
- Depends on gridstore.core and gridstore.io; must not import app.
"""

from __future__ import annotations

from .session import CellEdit, EditorSession, Outcome, clean_error_message
from .store import DataStore

__all__ = [
    "DataStore",
    "EditorSession",
    "CellEdit",
    "Outcome",
    "clean_error_message",
]
