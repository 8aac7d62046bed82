from __future__ import annotations

import datetime as dt

from ..db import Database
from ..domain.coerce import bind_int, new_id, parse_timestamp, to_rfc3339, utc_now
from ..errors import NotFoundError, ValidationError
from ..logs import LogContext
from ..models import PomodoroSession, PomodoroStats, to_dict
from ..repository import pomodoro_repo, task_repo
from .settings_svc import get_settings


def list_sessions(db: Database) -> list[PomodoroSession]:
    with db.connection() as conn:
        return [PomodoroSession.from_row(r) for r in pomodoro_repo.list_all(conn)]


def start_session(
    db: Database,
    task_id: str | None = None,
    duration_minutes: int | None = None,
    log: LogContext | None = None,
) -> PomodoroSession:
    """Start a session; without an explicit duration the configured work length is used."""
    if duration_minutes is None:
        duration_minutes = get_settings(db).work_minutes
    duration_minutes = bind_int(duration_minutes)
    if duration_minutes <= 0:
        raise ValidationError(f"duration_minutes must be positive, got {duration_minutes}")
    task_id = task_id or None
    session_id = new_id()
    with db.connection() as conn:
        if task_id is not None and not task_repo.exists(conn, task_id):
            raise NotFoundError("task", task_id)
        pomodoro_repo.insert(conn, session_id, task_id, duration_minutes, to_rfc3339(utc_now()))
        session = PomodoroSession.from_row(pomodoro_repo.get_one(conn, session_id))
    if log:
        log.set_entity("POMODORO", session_id)
        log.set_after(to_dict(session))
    return session


def complete_session(db: Database, session_id: str, log: LogContext | None = None) -> PomodoroSession:
    """
    Mark a session completed. The first completion stamps completed_at;
    repeated calls succeed and keep that first stamp.
    """
    with db.connection() as conn:
        if pomodoro_repo.mark_completed(conn, session_id, to_rfc3339(utc_now())) == 0:
            raise NotFoundError("pomodoro_session", session_id)
        session = PomodoroSession.from_row(pomodoro_repo.get_one(conn, session_id))
    if log:
        log.set_entity("POMODORO", session_id)
        log.set_after(to_dict(session))
    return session


def cancel_session(db: Database, session_id: str, log: LogContext | None = None) -> None:
    with db.connection() as conn:
        if pomodoro_repo.delete(conn, session_id) == 0:
            raise NotFoundError("pomodoro_session", session_id)
    if log:
        log.set_entity("POMODORO", session_id)


def _range_bound(value: str | None, end: bool) -> str | None:
    """Normalize a range bound; a bare date as the end bound covers that whole day."""
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValidationError(f"invalid date: {value!r}")
    try:
        ts = parse_timestamp(value)
    except ValueError:
        raise ValidationError(f"invalid date: {value!r}") from None
    if end and len(value.strip()) == 10:
        ts = ts + dt.timedelta(days=1) - dt.timedelta(microseconds=1)
    return to_rfc3339(ts)


def get_stats(db: Database, start_date: str | None = None, end_date: str | None = None) -> PomodoroStats:
    """Totals over sessions created in [start_date, end_date]; avg_duration is None with no completed session."""
    start = _range_bound(start_date, end=False)
    end = _range_bound(end_date, end=True)
    with db.connection() as conn:
        r = pomodoro_repo.stats(conn, start, end)
    avg = r["avg_duration"]
    return PomodoroStats(
        total_sessions=int(r["total_sessions"]),
        completed_sessions=int(r["completed_sessions"]),
        total_minutes=int(r["total_minutes"]),
        avg_duration=float(avg) if avg is not None else None,
    )


def get_sessions_by_task(db: Database, task_id: str) -> list[PomodoroSession]:
    with db.connection() as conn:
        return [PomodoroSession.from_row(r) for r in pomodoro_repo.list_by_task(conn, task_id)]
