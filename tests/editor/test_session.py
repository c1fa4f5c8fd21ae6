from __future__ import annotations

import pytest
from pydantic import ValidationError

from gridstore.core.errors import ErrorKind
from gridstore.datasets import mtcars
from gridstore.editor.session import CellEdit, EditorSession, Outcome, clean_error_message
from gridstore.editor.store import DataStore
from gridstore.io.config import StoreSettings


@pytest.fixture
def session(mtcars_settings: StoreSettings):
    with EditorSession.open(mtcars_settings) as s:
        yield s


def test_grid_rows_are_zero_based(session: EditorSession) -> None:
    outcome = session.apply_edit(0, "mpg", "22.5")

    assert outcome.ok
    assert outcome.kind is None
    assert "row 1" in outcome.message
    assert session.store.cell(1, "mpg") == 22.5
    assert session.modified_count == 1
    assert session.can_save and session.can_revert


def test_grid_column_positions_are_zero_based(session: EditorSession) -> None:
    assert session.apply_edit(31, 1, "30").ok  # position 1 is mpg
    assert session.store.cell(32, "mpg") == 30.0


def test_failed_edit_becomes_outcome(session: EditorSession) -> None:
    outcome = session.apply_edit(32, "mpg", "1")

    assert not outcome.ok
    assert outcome.kind is ErrorKind.STRUCTURAL
    assert outcome.message.startswith("Update failed: row 33 is out of bounds")
    assert session.modified_count == 0
    assert not session.can_save


def test_apply_edits_stops_at_first_failure(session: EditorSession) -> None:
    outcomes = session.apply_edits(
        [
            {"row": 0, "column": "hp", "value": "120"},
            CellEdit(row=1, column="mpg", value="fast"),
            {"row": 2, "column": "hp", "value": "1"},
        ]
    )

    assert [o.ok for o in outcomes] == [True, False]
    assert outcomes[-1].kind is ErrorKind.COERCION
    assert session.store.cell(1, "hp") == 120
    assert session.store.cell(3, "hp") == 93


def test_save_and_revert_outcomes(session: EditorSession) -> None:
    session.apply_edit(0, "mpg", 22.5)
    saved = session.save()
    assert saved.ok
    assert saved.message == "Changes saved successfully (1 edits)"
    assert session.modified_count == 0

    session.apply_edit(0, "mpg", 99)
    reverted = session.revert()
    assert reverted == Outcome(ok=True, message="Data reverted to original state")
    assert session.store.cell(1, "mpg") == 22.5
    assert session.summary().message == "Rows: 32 | Columns: 12"


def test_save_failure_is_reported_not_raised(memory_gateway_factory) -> None:
    gw = memory_gateway_factory({"mtcars": mtcars()})
    session = EditorSession(DataStore(gw))
    session.apply_edit(0, "mpg", 1.0)
    gw.live = False

    outcome = session.save()
    assert not outcome.ok
    assert outcome.kind is ErrorKind.CONNECTION
    assert session.modified_count == 1

    session.close()
    assert session.store.closed


def test_cell_edit_rejects_negative_rows() -> None:
    with pytest.raises(ValidationError):
        CellEdit(row=-1, column="mpg", value=1)


def test_clean_error_message_strips_ansi() -> None:
    assert clean_error_message("\x1b[31mSave failed\x1b[0m: boom") == "Save failed: boom"
