import pytest

from focusdesk.db import Database, ensure_schema
from focusdesk.errors import ConnectionAcquisitionError, QueryExecutionError, RowMappingError
from focusdesk.services import note_svc


def test_pool_exhaustion_raises(tmp_path):
    small = Database(str(tmp_path / "pool.db"), pool_size=1, timeout=0.05)
    try:
        with small.connection():
            with pytest.raises(ConnectionAcquisitionError):
                with small.connection():
                    pass
        # released connection is reusable
        with small.connection() as conn:
            assert conn.execute("SELECT 1").fetchone()[0] == 1
    finally:
        small.close()


def test_foreign_keys_enforced(db):
    with pytest.raises(QueryExecutionError):
        note_svc.create_note(db, "n", "", project_id="missing")


def test_transaction_rolls_back_on_error(db):
    with pytest.raises(RuntimeError):
        with db.transaction() as conn:
            conn.execute(
                "INSERT INTO projects(id, name, color, is_archived, created_at, updated_at) "
                "VALUES('p1', 'x', '#000000', 0, '2025-01-01T00:00:00.000000+00:00', '2025-01-01T00:00:00.000000+00:00')"
            )
            raise RuntimeError("boom")
    with db.connection() as conn:
        assert conn.execute("SELECT COUNT(*) FROM projects").fetchone()[0] == 0


def test_corrupt_timestamp_is_row_mapping_error(db):
    with db.connection() as conn:
        conn.execute(
            "INSERT INTO notes(id, title, content, created_at, updated_at) VALUES('bad', 't', 'c', 'yesterday', 'yesterday')"
        )
    with pytest.raises(RowMappingError):
        note_svc.get_note(db, "bad")


def test_ensure_schema_is_idempotent(db):
    ensure_schema(db)
    ensure_schema(db)


# Table layout written by the first desktop release
_FIRST_RELEASE_DDL = """
CREATE TABLE notes (
    id TEXT PRIMARY KEY, title TEXT NOT NULL, content TEXT NOT NULL,
    created_at TEXT NOT NULL, updated_at TEXT NOT NULL, project_id TEXT
);
CREATE TABLE tags (id TEXT PRIMARY KEY, name TEXT NOT NULL UNIQUE, color TEXT NOT NULL);
CREATE TABLE tasks (
    id TEXT PRIMARY KEY, title TEXT NOT NULL, description TEXT,
    is_completed INTEGER NOT NULL DEFAULT 0, priority INTEGER NOT NULL DEFAULT 3,
    due_date TEXT, remind_at TEXT, created_at TEXT NOT NULL, updated_at TEXT NOT NULL,
    project_id TEXT, parent_id TEXT, position INTEGER NOT NULL,
    FOREIGN KEY (parent_id) REFERENCES tasks(id) ON DELETE CASCADE
);
CREATE TABLE pomodoro_sessions (
    id TEXT PRIMARY KEY, started_at TEXT NOT NULL, ended_at TEXT,
    duration INTEGER NOT NULL, is_completed INTEGER NOT NULL DEFAULT 0,
    task_id TEXT, notes TEXT,
    FOREIGN KEY (task_id) REFERENCES tasks(id) ON DELETE SET NULL
);
CREATE TABLE projects (
    id TEXT PRIMARY KEY, name TEXT NOT NULL, description TEXT,
    status TEXT NOT NULL DEFAULT 'active', created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL, due_date TEXT, color TEXT NOT NULL DEFAULT '#3b82f6'
);
CREATE TABLE kanban_columns (
    id TEXT PRIMARY KEY, project_id TEXT NOT NULL, name TEXT NOT NULL, position INTEGER NOT NULL,
    FOREIGN KEY (project_id) REFERENCES projects(id) ON DELETE CASCADE
);
CREATE INDEX idx_pomodoro_task_id ON pomodoro_sessions(task_id);
"""

_TS = "2024-05-01T09:00:00.123456789+00:00"


def test_first_release_database_is_upgraded(tmp_path):
    import datetime as dt
    from focusdesk.services import kanban_svc, pomodoro_svc, project_svc, tag_svc

    old = Database(str(tmp_path / "first_release.db"), pool_size=1)
    try:
        with old.connection() as conn:
            conn.executescript(_FIRST_RELEASE_DDL)
            conn.execute("INSERT INTO projects(id, name, status, created_at, updated_at) VALUES('p1', 'Old', 'archived', ?, ?)", (_TS, _TS))
            conn.execute("INSERT INTO notes VALUES('n1', 'kept', 'body', ?, ?, 'p1')", (_TS, _TS))
            conn.execute("INSERT INTO tags VALUES('g1', 'legacy', '#111111')")
            conn.execute("INSERT INTO kanban_columns VALUES('c1', 'p1', 'Todo', 1)")
            conn.execute(
                "INSERT INTO pomodoro_sessions(id, started_at, ended_at, duration, is_completed) "
                "VALUES('s1', ?, '2024-05-01T09:30:00+00:00', 30, 1)",
                (_TS,),
            )

        ensure_schema(old)
        ensure_schema(old)

        assert [t.name for t in tag_svc.list_tags(old)] == ["legacy"]
        assert tag_svc.get_tag(old, "g1").created_at is not None

        sessions = pomodoro_svc.list_sessions(old)
        assert [(s.id, s.duration_minutes, s.is_completed) for s in sessions] == [("s1", 30, True)]
        assert sessions[0].started_at == dt.datetime(2024, 5, 1, 9, 0, 0, 123456, tzinfo=dt.timezone.utc)
        assert sessions[0].completed_at == dt.datetime(2024, 5, 1, 9, 30, tzinfo=dt.timezone.utc)
        assert pomodoro_svc.start_session(old).duration_minutes == 25
        assert pomodoro_svc.get_stats(old).total_minutes == 30

        assert project_svc.get_project(old, "p1").is_archived is True
        assert [c.color for c in kanban_svc.get_columns(old, "p1")] == ["#6B7280"]

        with old.connection() as conn:
            idx = conn.execute("SELECT tbl_name FROM sqlite_master WHERE name='idx_pomodoro_task_id'").fetchone()
            leftover = conn.execute("SELECT 1 FROM sqlite_master WHERE name='pomodoro_sessions_legacy'").fetchone()
        assert idx["tbl_name"] == "pomodoro_sessions"
        assert leftover is None

        # first-release notes carry no foreign key; project delete still detaches them
        project_svc.delete_project(old, "p1")
        assert note_svc.get_note(old, "n1").project_id is None
    finally:
        old.close()
