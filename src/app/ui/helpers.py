"""
Pure helpers for the gridstore Streamlit page.

Nothing here imports Streamlit. The session lifecycle helpers take the state mapping
(``st.session_state``) as an argument, so the page logic can be tested without a
running server.

Notes:
    - ``st.data_editor`` reports edits as ``{"edited_rows": {row: {column: value}}}``
      with 0-based row positions; CellEdit carries them unchanged and EditorSession
      does the 0-based to 1-based translation.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, MutableMapping, Sequence
from dataclasses import replace
from typing import Any

from gridstore.core.summary import Summary
from gridstore.editor import CellEdit, EditorSession
from gridstore.io.config import StoreSettings

SUMMARY_MEAN_COLUMNS: tuple[str, ...] = ("mpg", "hp")


def edits_from_editor_state(
    state: Mapping[str, Any] | None, columns: Sequence[str] | None = None
) -> list[CellEdit]:
    """Flatten a data_editor state mapping into an ordered list of CellEdit.

    Args:
        state (Mapping[str, Any] | None): Value of ``st.session_state[<editor key>]``.
        columns (Sequence[str] | None): Grid column names, used to resolve edits keyed
            by 0-based column position. Names are passed through unchanged.

    Returns:
        list[CellEdit]: Edits sorted by row, then by column order within a row.
    """
    if not state:
        return []
    edited = state.get("edited_rows") or {}
    order = {name: i for i, name in enumerate(columns or ())}
    edits: list[CellEdit] = []
    for row in sorted(edited, key=int):
        changes = edited[row] or {}
        for column in sorted(changes, key=lambda c: order.get(c, len(order))):
            key: str | int = column
            if isinstance(column, int) and columns is not None and 0 <= column < len(columns):
                key = columns[column]
            edits.append(CellEdit(row=int(row), column=key, value=changes[column]))
    return edits


def format_mean(value: float | None, digits: int = 2) -> str:
    """Format a column mean for display ("n/a" when missing)."""
    if value is None:
        return "n/a"
    return f"{value:.{digits}f}"


def summary_metrics(summary: Summary, modified_count: int) -> list[tuple[str, str]]:
    """Label/value pairs for the summary panel.

    Args:
        summary (Summary): Current working-copy summary.
        modified_count (int): Pending edit count.

    Returns:
        list[tuple[str, str]]: Rows, Columns, one "Average <col>" per available
        SUMMARY_MEAN_COLUMNS entry, then Modified.
    """
    means = summary.numeric_means or {}
    metrics = [("Rows", str(summary.rows)), ("Columns", str(summary.cols))]
    for name in SUMMARY_MEAN_COLUMNS:
        if name in means:
            metrics.append((f"Average {name}", format_mean(means[name])))
    metrics.append(("Modified", str(modified_count)))
    return metrics


def resolve_settings(
    db_path: str | None = None,
    table_name: str | None = None,
    backend: str | None = None,
) -> StoreSettings:
    """StoreSettings.load() with explicit launcher arguments taking precedence."""
    s = StoreSettings.load()
    overrides: dict[str, Any] = {}
    if db_path:
        overrides["db_path"] = db_path
    if table_name:
        overrides["table_name"] = table_name
    if backend:
        overrides["backend"] = backend
    return replace(s, **overrides) if overrides else s


SESSION_KEY = "gridstore_session"
SESSION_SETTINGS_KEY = "gridstore_session_settings"


def session_for(
    state: MutableMapping[str, Any],
    settings: StoreSettings,
    open_session: Callable[[StoreSettings], EditorSession] = EditorSession.open,
) -> EditorSession:
    """Return the EditorSession kept in ``state`` for ``settings``.

    A session opened for different settings, or one whose store was closed, is
    closed and replaced, so at most one backing connection is held per browser
    session.

    Args:
        state (MutableMapping[str, Any]): Per-browser-session state (``st.session_state``).
        settings (StoreSettings): Settings the page is rendering with.
        open_session (Callable): Opener for a new session.

    Raises:
        GridStoreError: If the new session cannot be opened. The previous one is
            already closed by then.
    """
    current = state.get(SESSION_KEY)
    if current is not None:
        if state.get(SESSION_SETTINGS_KEY) == settings and not current.store.closed:
            return current
        close_session(state)
    session = open_session(settings)
    state[SESSION_KEY] = session
    state[SESSION_SETTINGS_KEY] = settings
    return session


def close_session(state: MutableMapping[str, Any]) -> bool:
    """Close and forget the session kept in ``state``. Returns True if one was open."""
    session = state.pop(SESSION_KEY, None)
    state.pop(SESSION_SETTINGS_KEY, None)
    if session is None:
        return False
    session.close()
    return True
