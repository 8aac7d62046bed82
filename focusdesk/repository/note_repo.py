from __future__ import annotations

from sqlite3 import Connection

from ..domain.coerce import bind_optional_ref, bind_text
from .partial_update import UpdateSpec, apply_update

_COLUMNS = "id, title, content, created_at, updated_at, project_id"

NOTE_UPDATE = UpdateSpec(
    table="notes",
    entity="note",
    columns=(
        ("title", bind_text),
        ("content", bind_text),
        ("project_id", bind_optional_ref),
    ),
)


def escape_like(q: str) -> str:
    return q.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def list_all(conn: Connection):
    return conn.execute(f"SELECT {_COLUMNS} FROM notes ORDER BY updated_at DESC").fetchall()


def get_one(conn: Connection, note_id: str):
    return conn.execute(f"SELECT {_COLUMNS} FROM notes WHERE id=?", (note_id,)).fetchone()


def insert(conn: Connection, note_id: str, title: str, content: str, project_id: str | None, now: str) -> None:
    conn.execute(
        "INSERT INTO notes(id, title, content, created_at, updated_at, project_id) VALUES(?,?,?,?,?,?)",
        (note_id, title, content, now, now, project_id),
    )


def update(
    conn: Connection,
    note_id: str,
    *,
    title: str | None = None,
    content: str | None = None,
    project_id: str | None = None,
) -> int:
    return apply_update(
        conn,
        NOTE_UPDATE,
        note_id,
        [("title", title), ("content", content), ("project_id", project_id)],
    )


def delete(conn: Connection, note_id: str) -> int:
    return conn.execute("DELETE FROM notes WHERE id=?", (note_id,)).rowcount


def search(conn: Connection, query: str):
    pattern = f"%{escape_like(query)}%"
    return conn.execute(
        f"SELECT {_COLUMNS} FROM notes "
        "WHERE title LIKE ? ESCAPE '\\' OR content LIKE ? ESCAPE '\\' "
        "ORDER BY updated_at DESC",
        (pattern, pattern),
    ).fetchall()


def list_by_project(conn: Connection, project_id: str):
    return conn.execute(
        f"SELECT {_COLUMNS} FROM notes WHERE project_id=? ORDER BY updated_at DESC",
        (project_id,),
    ).fetchall()


def clear_project(conn: Connection, project_id: str) -> int:
    return conn.execute("UPDATE notes SET project_id = NULL WHERE project_id=?", (project_id,)).rowcount
