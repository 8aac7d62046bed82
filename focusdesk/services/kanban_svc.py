from __future__ import annotations

from ..db import Database
from ..domain.coerce import bind_int, new_id, to_rfc3339, utc_now
from ..domain.ordering import next_position
from ..errors import NotFoundError, ValidationError
from ..logs import LogContext
from ..models import ColumnTask, KanbanColumn, Task, to_dict
from ..repository import kanban_repo, project_repo, task_repo
from ..repository.kanban_repo import DEFAULT_COLUMN_COLOR


def get_columns(db: Database, project_id: str) -> list[KanbanColumn]:
    with db.connection() as conn:
        return [KanbanColumn.from_row(r) for r in kanban_repo.list_for_project(conn, project_id)]


def create_column(
    db: Database,
    project_id: str,
    name: str,
    color: str | None = None,
    log: LogContext | None = None,
) -> KanbanColumn:
    """Append a column to the project's board."""
    column_id = new_id()
    with db.transaction() as conn:
        if not project_repo.exists(conn, project_id):
            raise NotFoundError("project", project_id)
        position = next_position(kanban_repo.max_position(conn, project_id))
        kanban_repo.insert(
            conn, column_id, project_id, name, color or DEFAULT_COLUMN_COLOR, position, to_rfc3339(utc_now())
        )
        column = KanbanColumn.from_row(kanban_repo.get_one(conn, column_id))
    if log:
        log.set_entity("KANBAN_COLUMN", column_id)
        log.set_after(to_dict(column))
    return column


def update_column(
    db: Database,
    column_id: str,
    *,
    name: str | None = None,
    color: str | None = None,
    position: int | None = None,
    log: LogContext | None = None,
) -> KanbanColumn:
    with db.connection() as conn:
        kanban_repo.update(conn, column_id, [("name", name), ("color", color), ("position", position)])
        column = KanbanColumn.from_row(kanban_repo.get_one(conn, column_id))
    if log:
        log.set_entity("KANBAN_COLUMN", column_id)
        log.set_after(to_dict(column))
    return column


def delete_column(db: Database, column_id: str, log: LogContext | None = None) -> None:
    """Remove the column; tasks stay, only their placement rows go."""
    with db.connection() as conn:
        if kanban_repo.delete(conn, column_id) == 0:
            raise NotFoundError("kanban_column", column_id)
    if log:
        log.set_entity("KANBAN_COLUMN", column_id)


def move_task_to_column(
    db: Database,
    task_id: str,
    column_id: str,
    position: int | None = None,
    log: LogContext | None = None,
) -> ColumnTask:
    """
    Place a task in a column, taking it out of any other column of the same board.
    Only tasks of the column's project can be placed.
    Without a position it goes to the end of the column.
    """
    if position is not None:
        position = bind_int(position)
    with db.transaction() as conn:
        column = kanban_repo.get_one(conn, column_id)
        if column is None:
            raise NotFoundError("kanban_column", column_id)
        task_row = task_repo.get_one(conn, task_id)
        if task_row is None:
            raise NotFoundError("task", task_id)
        if task_row["project_id"] != column["project_id"]:
            raise ValidationError(f"task {task_id} does not belong to project {column['project_id']}")
        kanban_repo.remove_task_from_project_columns(conn, task_id, column["project_id"])
        if position is None:
            position = next_position(kanban_repo.max_task_position(conn, column_id))
        kanban_repo.place_task(conn, task_id, column_id, position)
    if log:
        log.set_entity("TASK", task_id)
        log.set_after({"column_id": column_id, "position": position})
    return ColumnTask(column_id=column_id, position=position, task=Task.from_row(task_row))


def get_column_tasks(db: Database, column_id: str) -> list[ColumnTask]:
    with db.connection() as conn:
        rows = kanban_repo.list_column_tasks(conn, column_id)
    return [ColumnTask(column_id=r["column_id"], position=int(r["column_position"]), task=Task.from_row(r)) for r in rows]
