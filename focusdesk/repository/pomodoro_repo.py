from __future__ import annotations

from sqlite3 import Connection

_COLUMNS = "id, task_id, duration_minutes, is_completed, started_at, completed_at, created_at"


def list_all(conn: Connection):
    return conn.execute(f"SELECT {_COLUMNS} FROM pomodoro_sessions ORDER BY created_at DESC").fetchall()


def get_one(conn: Connection, session_id: str):
    return conn.execute(f"SELECT {_COLUMNS} FROM pomodoro_sessions WHERE id=?", (session_id,)).fetchone()


def insert(conn: Connection, session_id: str, task_id: str | None, duration_minutes: int, now: str) -> None:
    conn.execute(
        "INSERT INTO pomodoro_sessions(id, task_id, duration_minutes, is_completed, started_at, completed_at, created_at) "
        "VALUES(?,?,?,0,?,NULL,?)",
        (session_id, task_id, duration_minutes, now, now),
    )


def mark_completed(conn: Connection, session_id: str, now: str) -> int:
    """Stamp completion once; rows already completed keep their original completed_at."""
    return conn.execute(
        "UPDATE pomodoro_sessions SET is_completed = 1, completed_at = COALESCE(completed_at, ?) WHERE id=?",
        (now, session_id),
    ).rowcount


def delete(conn: Connection, session_id: str) -> int:
    return conn.execute("DELETE FROM pomodoro_sessions WHERE id=?", (session_id,)).rowcount


def list_by_task(conn: Connection, task_id: str):
    return conn.execute(
        f"SELECT {_COLUMNS} FROM pomodoro_sessions WHERE task_id=? ORDER BY created_at DESC",
        (task_id,),
    ).fetchall()


def stats(conn: Connection, start: str | None = None, end: str | None = None):
    where = []
    params: dict = {}
    if start:
        where.append("created_at >= :start")
        params["start"] = start
    if end:
        where.append("created_at <= :end")
        params["end"] = end
    wh = " WHERE " + " AND ".join(where) if where else ""
    sql = (
        "SELECT COUNT(*) AS total_sessions, "
        "COUNT(CASE WHEN is_completed = 1 THEN 1 END) AS completed_sessions, "
        "COALESCE(SUM(CASE WHEN is_completed = 1 THEN duration_minutes ELSE 0 END), 0) AS total_minutes, "
        "AVG(CASE WHEN is_completed = 1 THEN duration_minutes END) AS avg_duration "
        f"FROM pomodoro_sessions{wh}"
    )
    return conn.execute(sql, params).fetchone()
