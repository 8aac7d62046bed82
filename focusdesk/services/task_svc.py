from __future__ import annotations

from ..db import Database
from ..domain.coerce import bind_int, bind_timestamp, new_id, to_rfc3339, utc_now
from ..domain.ordering import check_reparent, next_position
from ..errors import NotFoundError
from ..logs import LogContext
from ..models import Task, to_dict
from ..repository import task_repo

DEFAULT_PRIORITY = 3


def list_tasks(db: Database) -> list[Task]:
    with db.connection() as conn:
        return [Task.from_row(r) for r in task_repo.list_all(conn)]


def get_task(db: Database, task_id: str) -> Task | None:
    with db.connection() as conn:
        row = task_repo.get_one(conn, task_id)
    return Task.from_row(row) if row else None


def create_task(
    db: Database,
    title: str,
    description: str | None = None,
    priority: int | None = None,
    due_date: str | None = None,
    remind_at: str | None = None,
    project_id: str | None = None,
    parent_id: str | None = None,
    log: LogContext | None = None,
) -> Task:
    """
    Insert a task at the end of its parent scope (max position + 1, or 1 for an empty scope).

    The position read and the insert share one transaction.
    """
    prio = DEFAULT_PRIORITY if priority is None else bind_int(priority)
    due = bind_timestamp(due_date) if due_date is not None else None
    remind = bind_timestamp(remind_at) if remind_at is not None else None
    parent_id = parent_id or None
    task_id = new_id()
    now = to_rfc3339(utc_now())

    with db.transaction() as conn:
        if parent_id is not None and not task_repo.exists(conn, parent_id):
            raise NotFoundError("task", parent_id)
        position = next_position(task_repo.max_position(conn, parent_id))
        task_repo.insert(
            conn, task_id, title, description, prio, due, remind,
            project_id or None, parent_id, position, now,
        )
        task = Task.from_row(task_repo.get_one(conn, task_id))
    if log:
        log.set_entity("TASK", task_id)
        log.set_after(to_dict(task))
    return task


def update_task(
    db: Database,
    task_id: str,
    *,
    title: str | None = None,
    description: str | None = None,
    is_completed: bool | None = None,
    priority: int | None = None,
    due_date: str | None = None,
    remind_at: str | None = None,
    project_id: str | None = None,
    log: LogContext | None = None,
) -> Task:
    """
    Partial update. Position is untouched, including when project_id changes,
    because position is scoped by parent. Empty strings clear due_date,
    remind_at and project_id.
    """
    fields = [
        ("title", title),
        ("description", description),
        ("is_completed", is_completed),
        ("priority", priority),
        ("due_date", due_date),
        ("remind_at", remind_at),
        ("project_id", project_id),
    ]
    with db.transaction() as conn:
        before = task_repo.get_one(conn, task_id)
        if before is None:
            raise NotFoundError("task", task_id)
        task_repo.update(conn, task_id, fields)
        task = Task.from_row(task_repo.get_one(conn, task_id))
    if log:
        log.set_entity("TASK", task_id)
        log.set_before(dict(before))
        log.set_after(to_dict(task))
    return task


def toggle_task_complete(db: Database, task_id: str, log: LogContext | None = None) -> Task:
    with db.transaction() as conn:
        row = task_repo.get_one(conn, task_id)
        if row is None:
            raise NotFoundError("task", task_id)
        flipped = not Task.from_row(row).is_completed
        task_repo.update(conn, task_id, [("is_completed", flipped)])
        task = Task.from_row(task_repo.get_one(conn, task_id))
    if log:
        log.set_entity("TASK", task_id)
        log.set_after({"is_completed": task.is_completed})
    return task


def update_task_position(db: Database, task_id: str, new_position: int, log: LogContext | None = None) -> Task:
    """Set position verbatim. Siblings are not shifted, so duplicates and gaps may appear."""
    with db.connection() as conn:
        before = task_repo.get_one(conn, task_id)
        task_repo.set_position(conn, task_id, new_position)
        task = Task.from_row(task_repo.get_one(conn, task_id))
    if log:
        log.set_entity("TASK", task_id)
        log.set_before({"position": before["position"] if before else None})
        log.set_after({"position": task.position})
    return task


def move_task_to_parent(db: Database, task_id: str, parent_id: str | None, log: LogContext | None = None) -> Task:
    """Re-parent a task (``None`` = root) and append it to the end of the new scope."""
    parent_id = parent_id or None
    with db.transaction() as conn:
        row = task_repo.get_one(conn, task_id)
        if row is None:
            raise NotFoundError("task", task_id)
        if row["parent_id"] == parent_id:
            return Task.from_row(row)
        if parent_id is not None:
            chain = task_repo.ancestry(conn, parent_id)
            if not chain:
                raise NotFoundError("task", parent_id)
            check_reparent(task_id, parent_id, chain)
        position = next_position(task_repo.max_position(conn, parent_id))
        task_repo.set_parent(conn, task_id, parent_id, position, to_rfc3339(utc_now()))
        task = Task.from_row(task_repo.get_one(conn, task_id))
    if log:
        log.set_entity("TASK", task_id)
        log.set_before({"parent_id": row["parent_id"], "position": row["position"]})
        log.set_after({"parent_id": task.parent_id, "position": task.position})
    return task


def delete_task(db: Database, task_id: str, log: LogContext | None = None) -> None:
    """Delete a task; its subtasks go with it through the parent_id cascade."""
    with db.connection() as conn:
        if task_repo.delete(conn, task_id) == 0:
            raise NotFoundError("task", task_id)
    if log:
        log.set_entity("TASK", task_id)


def get_tasks_by_project(db: Database, project_id: str) -> list[Task]:
    with db.connection() as conn:
        return [Task.from_row(r) for r in task_repo.list_by_project(conn, project_id)]


def get_subtasks(db: Database, parent_id: str) -> list[Task]:
    with db.connection() as conn:
        return [Task.from_row(r) for r in task_repo.list_children(conn, parent_id)]
