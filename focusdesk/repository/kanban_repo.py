from __future__ import annotations

from sqlite3 import Connection

from ..domain.coerce import bind_int, bind_text
from .partial_update import UpdateSpec, apply_update

DEFAULT_COLUMN_COLOR = "#6B7280"

_COLUMNS = "id, project_id, name, color, position, created_at, updated_at"

COLUMN_UPDATE = UpdateSpec(
    table="kanban_columns",
    entity="kanban_column",
    columns=(("name", bind_text), ("color", bind_text), ("position", bind_int)),
)


def list_for_project(conn: Connection, project_id: str):
    return conn.execute(
        f"SELECT {_COLUMNS} FROM kanban_columns WHERE project_id=? ORDER BY position ASC, created_at ASC",
        (project_id,),
    ).fetchall()


def get_one(conn: Connection, column_id: str):
    return conn.execute(f"SELECT {_COLUMNS} FROM kanban_columns WHERE id=?", (column_id,)).fetchone()


def max_position(conn: Connection, project_id: str) -> int | None:
    return conn.execute(
        "SELECT MAX(position) AS m FROM kanban_columns WHERE project_id=?", (project_id,)
    ).fetchone()["m"]


def insert(conn: Connection, column_id: str, project_id: str, name: str, color: str, position: int, now: str) -> None:
    conn.execute(
        "INSERT INTO kanban_columns(id, project_id, name, color, position, created_at, updated_at) "
        "VALUES(?,?,?,?,?,?,?)",
        (column_id, project_id, name, color, position, now, now),
    )


def update(conn: Connection, column_id: str, fields) -> int:
    return apply_update(conn, COLUMN_UPDATE, column_id, fields)


def delete(conn: Connection, column_id: str) -> int:
    return conn.execute("DELETE FROM kanban_columns WHERE id=?", (column_id,)).rowcount


# ===== column_tasks association =====
def max_task_position(conn: Connection, column_id: str) -> int | None:
    return conn.execute(
        "SELECT MAX(position) AS m FROM column_tasks WHERE column_id=?", (column_id,)
    ).fetchone()["m"]


def remove_task_from_project_columns(conn: Connection, task_id: str, project_id: str) -> int:
    return conn.execute(
        "DELETE FROM column_tasks WHERE task_id=? "
        "AND column_id IN (SELECT id FROM kanban_columns WHERE project_id=?)",
        (task_id, project_id),
    ).rowcount


def place_task(conn: Connection, task_id: str, column_id: str, position: int) -> None:
    conn.execute(
        "INSERT INTO column_tasks(task_id, column_id, position) VALUES(?,?,?) "
        "ON CONFLICT(task_id, column_id) DO UPDATE SET position=excluded.position",
        (task_id, column_id, position),
    )


def list_column_tasks(conn: Connection, column_id: str):
    return conn.execute(
        "SELECT ct.column_id, ct.position AS column_position, t.* "
        "FROM column_tasks ct JOIN tasks t ON t.id = ct.task_id "
        "WHERE ct.column_id=? ORDER BY ct.position ASC, t.created_at DESC",
        (column_id,),
    ).fetchall()
