import pytest

from focusdesk.errors import NotFoundError, ValidationError
from focusdesk.repository.note_repo import NOTE_UPDATE
from focusdesk.repository.partial_update import apply_update, build_update
from focusdesk.repository.tag_repo import TAG_UPDATE
from focusdesk.repository.task_repo import TASK_UPDATE
from focusdesk.services import note_svc

NOW = "2025-01-01T00:00:00.000000+00:00"


def test_only_present_fields_are_written():
    stmt = build_update(TASK_UPDATE, "t1", {"title": "x", "priority": None, "is_completed": True}, now=NOW)
    assert stmt.sql == "UPDATE tasks SET title = ?, is_completed = ?, updated_at = ? WHERE id = ?"
    assert stmt.params == ("x", 1, NOW, "t1")


def test_empty_update_only_touches_timestamp():
    stmt = build_update(NOTE_UPDATE, "n1", {}, now=NOW)
    assert stmt.sql == "UPDATE notes SET updated_at = ? WHERE id = ?"
    assert stmt.params == (NOW, "n1")


def test_empty_update_without_touch_column_is_noop():
    assert build_update(TAG_UPDATE, "g1", {"name": None, "color": None}) is None


def test_unknown_field_rejected():
    # column names only come from the declared table
    with pytest.raises(ValidationError):
        build_update(NOTE_UPDATE, "n1", {"title; DROP TABLE notes": "x"})


def test_binder_errors_surface_before_sql():
    with pytest.raises(ValidationError):
        build_update(TASK_UPDATE, "t1", {"priority": "high"})
    with pytest.raises(ValidationError):
        build_update(TASK_UPDATE, "t1", {"due_date": "not-a-date"})
    with pytest.raises(ValidationError):
        build_update(TASK_UPDATE, "t1", {"is_completed": 2})


def test_empty_string_clears_nullable_columns():
    stmt = build_update(TASK_UPDATE, "t1", [("due_date", ""), ("project_id", "")], now=NOW)
    assert stmt.params == (None, None, NOW, "t1")


def test_timestamps_normalized_to_utc():
    stmt = build_update(TASK_UPDATE, "t1", {"due_date": "2025-03-01T10:00:00+02:00"}, now=NOW)
    assert stmt.params[0] == "2025-03-01T08:00:00.000000+00:00"


def test_apply_update_missing_row_raises(db):
    with db.connection() as conn:
        with pytest.raises(NotFoundError) as ei:
            apply_update(conn, NOTE_UPDATE, "missing", {"title": "x"})
    assert str(ei.value) == "note_not_found: missing"


def test_partial_update_keeps_other_fields(db):
    note = note_svc.create_note(db, "title", "body")
    updated = note_svc.update_note(db, note.id, content="new body")
    assert updated.title == "title"
    assert updated.content == "new body"
    assert updated.created_at == note.created_at
    assert updated.updated_at >= note.updated_at
