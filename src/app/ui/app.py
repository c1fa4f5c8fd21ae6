"""
Streamlit page for the gridstore editor.

Responsibilities:
    - Configure the page and own one EditorSession per browser session
      (``st.session_state``), opened lazily from StoreSettings.
    - Render the working copy in ``st.data_editor`` and forward each edit batch to
      the session; failures become notifications and the grid re-renders from the
      last good working snapshot.
    - Save/Revert buttons, enabled only while there are pending edits, and a Close
      button that releases the backing connection until Reopen.
    - A session opened for other settings is closed before a new one is opened.
    - Summary panel (Rows, Columns, Average mpg, Average hp, Modified).

Notes:
    - The editor widget key carries a version number that is bumped after every
      edit batch, save, or revert, so the widget always starts from the store's
      working copy instead of replaying stale edits.
"""

from __future__ import annotations

import logging

import streamlit as st

from gridstore.core.errors import GridStoreError
from gridstore.editor import EditorSession, Outcome, clean_error_message
from gridstore.io.config import StoreSettings

from .helpers import (
    close_session,
    edits_from_editor_state,
    resolve_settings,
    session_for,
    summary_metrics,
)

logger = logging.getLogger(__name__)

_VERSION_KEY = "gridstore_grid_version"
_NOTICES_KEY = "gridstore_notices"
_CLOSED_KEY = "gridstore_closed"


def _editor_key() -> str:
    return f"gridstore_grid_{st.session_state.get(_VERSION_KEY, 0)}"


def _bump_version() -> None:
    st.session_state[_VERSION_KEY] = st.session_state.get(_VERSION_KEY, 0) + 1


def _notify(outcome: Outcome) -> None:
    st.session_state.setdefault(_NOTICES_KEY, []).append(outcome)


def _get_session(settings: StoreSettings) -> EditorSession | None:
    """Return this browser session's EditorSession, (re)opening it for ``settings``."""
    try:
        return session_for(st.session_state, settings)
    except GridStoreError as exc:
        logger.error("Failed to open %s (%s): %s", settings.db_path, settings.table_name, exc)
        st.error(f"Failed to open data store: {clean_error_message(str(exc))}")
        return None


def _on_grid_change(session: EditorSession, key: str, columns: list[str]) -> None:
    edits = edits_from_editor_state(st.session_state.get(key), columns)
    for outcome in session.apply_edits(edits):
        if not outcome.ok:
            _notify(outcome)
    _bump_version()


def _on_save(session: EditorSession) -> None:
    _notify(session.save())
    _bump_version()


def _on_revert(session: EditorSession) -> None:
    _notify(session.revert())
    _bump_version()


def _on_close() -> None:
    close_session(st.session_state)
    st.session_state[_CLOSED_KEY] = True
    _bump_version()


def _on_reopen() -> None:
    st.session_state.pop(_CLOSED_KEY, None)


def _render_notices() -> None:
    for outcome in st.session_state.pop(_NOTICES_KEY, []):
        if outcome.ok:
            st.success(outcome.message)
        else:
            st.error(outcome.message)


def _render_summary(session: EditorSession) -> None:
    st.subheader("Summary")
    try:
        summary = session.summary()
    except GridStoreError as exc:
        st.error(clean_error_message(str(exc)))
        return
    metrics = summary_metrics(summary, session.modified_count)
    for col, (label, value) in zip(st.columns(len(metrics)), metrics, strict=True):
        with col:
            st.metric(label, value)


def streamlit_app(
    db_path: str | None = None,
    table_name: str | None = None,
    backend: str | None = None,
) -> None:
    """Render the gridstore editor page.

    Args:
        db_path (str | None): Database file (or parquet root); defaults to StoreSettings.
        table_name (str | None): Table to edit; defaults to StoreSettings.
        backend (str | None): "duckdb" or "parquet"; defaults to StoreSettings.

    Returns:
        None
    """
    st.set_page_config(page_title="gridstore", layout="wide")
    st.title("gridstore")

    try:
        settings = resolve_settings(db_path, table_name, backend)
    except GridStoreError as exc:
        st.error(clean_error_message(str(exc)))
        return
    st.caption(f"{settings.backend}: {settings.db_path} / {settings.table_name}")

    if st.session_state.get(_CLOSED_KEY):
        st.info("Connection closed.")
        st.button("Reopen", on_click=_on_reopen)
        return

    session = _get_session(settings)
    if session is None:
        return

    _render_notices()

    working = session.store.working
    key = _editor_key()
    st.data_editor(
        working,
        key=key,
        num_rows="fixed",
        hide_index=False,
        width="stretch",
        on_change=_on_grid_change,
        args=(session, key, list(working.columns)),
    )

    c1, c2, c3, _ = st.columns([1, 1, 1, 5])
    with c1:
        st.button(
            "Save",
            type="primary",
            disabled=not session.can_save,
            on_click=_on_save,
            args=(session,),
        )
    with c2:
        st.button("Revert", disabled=not session.can_revert, on_click=_on_revert, args=(session,))
    with c3:
        st.button("Close", disabled=session.can_save, on_click=_on_close)

    _render_summary(session)
