from __future__ import annotations

from sqlite3 import Connection

from ..domain.coerce import bind_bool, bind_text
from .partial_update import UpdateSpec, apply_update

DEFAULT_PROJECT_COLOR = "#3B82F6"

_COLUMNS = "id, name, description, color, is_archived, created_at, updated_at"

PROJECT_UPDATE = UpdateSpec(
    table="projects",
    entity="project",
    columns=(
        ("name", bind_text),
        ("description", bind_text),
        ("color", bind_text),
        ("is_archived", bind_bool),
    ),
)


def list_all(conn: Connection, include_archived: bool = True):
    sql = f"SELECT {_COLUMNS} FROM projects"
    if not include_archived:
        sql += " WHERE is_archived = 0"
    sql += " ORDER BY created_at DESC"
    return conn.execute(sql).fetchall()


def get_one(conn: Connection, project_id: str):
    return conn.execute(f"SELECT {_COLUMNS} FROM projects WHERE id=?", (project_id,)).fetchone()


def exists(conn: Connection, project_id: str) -> bool:
    return conn.execute("SELECT 1 FROM projects WHERE id=?", (project_id,)).fetchone() is not None


def insert(conn: Connection, project_id: str, name: str, description: str | None, color: str, now: str) -> None:
    conn.execute(
        "INSERT INTO projects(id, name, description, color, is_archived, created_at, updated_at) "
        "VALUES(?,?,?,?,0,?,?)",
        (project_id, name, description, color, now, now),
    )


def update(conn: Connection, project_id: str, fields) -> int:
    return apply_update(conn, PROJECT_UPDATE, project_id, fields)


def delete(conn: Connection, project_id: str) -> int:
    return conn.execute("DELETE FROM projects WHERE id=?", (project_id,)).rowcount
