"""
Session-scoped owner of a DataStore and the boundary to a grid UI.

A grid widget reports edits with 0-based row (and column) positions; the DataStore
contract is 1-based. EditorSession translates at this one place and turns store
errors into ``Outcome`` values that the UI can show as a notification while it keeps
rendering the last good working snapshot.

One EditorSession per interactive session: create it when the session starts, pass
it explicitly to whatever handles UI events, and close it when the session ends.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field

from gridstore.core.errors import ErrorKind, GridStoreError
from gridstore.core.summary import Summary
from gridstore.io.config import StoreSettings

from .store import DataStore

__all__ = [
    "CellEdit",
    "Outcome",
    "EditorSession",
    "clean_error_message",
]

logger = logging.getLogger(__name__)

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def clean_error_message(message: str) -> str:
    """Strip ANSI color escape codes so a message renders cleanly in a web UI."""
    return _ANSI_RE.sub("", message)


def _to_store_index(position: Any) -> Any:
    # Non-integers pass through untouched and are rejected by the store's validators.
    if isinstance(position, int) and not isinstance(position, bool):
        return position + 1
    return position


class CellEdit(BaseModel):
    """
    One edit event from the grid.

    Attributes:
        row (int): 0-based grid row.
        column (str | int): Column name, or 0-based grid column position.
        value (Any): Raw value typed by the user.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    row: int = Field(ge=0)
    column: str | int
    value: Any = None


class Outcome(BaseModel):
    """
    Result of a session operation, ready for display.

    Attributes:
        ok (bool): Whether the operation succeeded.
        message (str): Notification text.
        kind (ErrorKind | None): Error taxonomy tag when ``ok`` is False.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    ok: bool
    message: str
    kind: ErrorKind | None = None

    @classmethod
    def success(cls, message: str) -> Outcome:
        return cls(ok=True, message=message)

    @classmethod
    def failure(cls, exc: GridStoreError) -> Outcome:
        return cls(ok=False, message=clean_error_message(str(exc)), kind=exc.kind)


class EditorSession:
    """
    Owns one DataStore for one interactive session.

    Usage:
        with EditorSession.open(StoreSettings.load()) as session:
            outcome = session.apply_edit(0, "mpg", "22.5")
            if outcome.ok:
                session.save()
    """

    def __init__(self, store: DataStore) -> None:
        self.store = store

    @classmethod
    def open(cls, settings: StoreSettings) -> EditorSession:
        return cls(DataStore.open(settings))

    @property
    def modified_count(self) -> int:
        return self.store.get_modified_count()

    @property
    def can_save(self) -> bool:
        return self.store.is_dirty

    @property
    def can_revert(self) -> bool:
        return self.store.is_dirty

    def apply_edit(self, row: int, column: str | int, value: Any) -> Outcome:
        """
        Apply one grid edit (0-based row, column name or 0-based position).
        """
        store_row = _to_store_index(row)
        store_col = _to_store_index(column)
        try:
            self.store.update_cell(store_row, store_col, value)
        except GridStoreError as exc:
            logger.warning("Update failed for row %r, column %r: %s", row, column, exc.message)
            return Outcome.failure(exc)
        return Outcome.success(f"Cell updated: row {store_row}, column {column!r}, value {value!r}")

    def apply_edits(self, edits: Iterable[CellEdit | Mapping[str, Any]]) -> list[Outcome]:
        """
        Apply a batch of grid edits in order, stopping at the first failure.

        Returns:
            list[Outcome]: One outcome per attempted edit; the last one is the failure,
            if any.
        """
        outcomes: list[Outcome] = []
        for raw in edits:
            edit = raw if isinstance(raw, CellEdit) else CellEdit.model_validate(raw)
            outcome = self.apply_edit(edit.row, edit.column, edit.value)
            outcomes.append(outcome)
            if not outcome.ok:
                break
        return outcomes

    def save(self) -> Outcome:
        count = self.modified_count
        try:
            self.store.save()
        except GridStoreError as exc:
            logger.error("Save failed: %s", exc)
            return Outcome.failure(exc)
        return Outcome.success(f"Changes saved successfully ({count} edits)")

    def revert(self) -> Outcome:
        try:
            self.store.revert()
        except GridStoreError as exc:
            logger.error("Revert failed: %s", exc)
            return Outcome.failure(exc)
        return Outcome.success("Data reverted to original state")

    def summary(self) -> Summary:
        return self.store.summary()

    def close(self) -> None:
        self.store.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
