from __future__ import annotations

from sqlite3 import Connection

from ..domain.coerce import bind_bool, bind_int, bind_optional_ref, bind_text, bind_timestamp
from ..domain.ordering import TASK_ORDER_BY
from .partial_update import UpdateSpec, apply_update

_COLUMNS = (
    "id, title, description, is_completed, priority, due_date, remind_at, "
    "created_at, updated_at, project_id, parent_id, position"
)

TASK_UPDATE = UpdateSpec(
    table="tasks",
    entity="task",
    columns=(
        ("title", bind_text),
        ("description", bind_text),
        ("is_completed", bind_bool),
        ("priority", bind_int),
        ("due_date", bind_timestamp),
        ("remind_at", bind_timestamp),
        ("project_id", bind_optional_ref),
    ),
)

TASK_POSITION_UPDATE = UpdateSpec(table="tasks", entity="task", columns=(("position", bind_int),))

# Guards the ancestry walk against a corrupted parent chain.
_MAX_DEPTH = 1000


def list_all(conn: Connection):
    return conn.execute(f"SELECT {_COLUMNS} FROM tasks ORDER BY {TASK_ORDER_BY}").fetchall()


def get_one(conn: Connection, task_id: str):
    return conn.execute(f"SELECT {_COLUMNS} FROM tasks WHERE id=?", (task_id,)).fetchone()


def exists(conn: Connection, task_id: str) -> bool:
    return conn.execute("SELECT 1 FROM tasks WHERE id=?", (task_id,)).fetchone() is not None


def max_position(conn: Connection, parent_id: str | None) -> int | None:
    """Highest position in the scope of ``parent_id``; ``IS`` makes NULL its own scope."""
    row = conn.execute("SELECT MAX(position) AS m FROM tasks WHERE parent_id IS ?", (parent_id,)).fetchone()
    return row["m"]


def insert(
    conn: Connection,
    task_id: str,
    title: str,
    description: str | None,
    priority: int,
    due_date: str | None,
    remind_at: str | None,
    project_id: str | None,
    parent_id: str | None,
    position: int,
    now: str,
) -> None:
    conn.execute(
        "INSERT INTO tasks(id, title, description, is_completed, priority, due_date, remind_at, "
        "created_at, updated_at, project_id, parent_id, position) "
        "VALUES(?,?,?,0,?,?,?,?,?,?,?,?)",
        (task_id, title, description, priority, due_date, remind_at, now, now, project_id, parent_id, position),
    )


def update(conn: Connection, task_id: str, fields) -> int:
    return apply_update(conn, TASK_UPDATE, task_id, fields)


def set_position(conn: Connection, task_id: str, position: int) -> int:
    return apply_update(conn, TASK_POSITION_UPDATE, task_id, [("position", position)])


def set_parent(conn: Connection, task_id: str, parent_id: str | None, position: int, now: str) -> int:
    return conn.execute(
        "UPDATE tasks SET parent_id=?, position=?, updated_at=? WHERE id=?",
        (parent_id, position, now, task_id),
    ).rowcount


def delete(conn: Connection, task_id: str) -> int:
    return conn.execute("DELETE FROM tasks WHERE id=?", (task_id,)).rowcount


def delete_by_project(conn: Connection, project_id: str) -> int:
    return conn.execute("DELETE FROM tasks WHERE project_id=?", (project_id,)).rowcount


def list_by_project(conn: Connection, project_id: str):
    return conn.execute(
        f"SELECT {_COLUMNS} FROM tasks WHERE project_id=? ORDER BY {TASK_ORDER_BY}",
        (project_id,),
    ).fetchall()


def list_children(conn: Connection, parent_id: str):
    return conn.execute(
        f"SELECT {_COLUMNS} FROM tasks WHERE parent_id=? ORDER BY {TASK_ORDER_BY}",
        (parent_id,),
    ).fetchall()


def ancestry(conn: Connection, task_id: str) -> list[str]:
    """``task_id`` followed by its parent, grandparent, ... up to the root."""
    rows = conn.execute(
        """
        WITH RECURSIVE chain(id, parent_id, depth) AS (
            SELECT id, parent_id, 0 FROM tasks WHERE id = ?
            UNION ALL
            SELECT t.id, t.parent_id, c.depth + 1
            FROM tasks t JOIN chain c ON t.id = c.parent_id
            WHERE c.depth < ?
        )
        SELECT id FROM chain ORDER BY depth
        """,
        (task_id, _MAX_DEPTH),
    ).fetchall()
    return [r["id"] for r in rows]


def stats_for_project(conn: Connection, project_id: str):
    return conn.execute(
        "SELECT COUNT(*) AS total_tasks, "
        "COUNT(CASE WHEN is_completed = 1 THEN 1 END) AS completed_tasks, "
        "COUNT(CASE WHEN is_completed = 0 THEN 1 END) AS pending_tasks "
        "FROM tasks WHERE project_id=?",
        (project_id,),
    ).fetchone()
