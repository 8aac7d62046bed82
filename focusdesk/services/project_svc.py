from __future__ import annotations

import logging

from ..db import Database
from ..domain.coerce import new_id, to_rfc3339, utc_now
from ..errors import NotFoundError
from ..logs import LogContext
from ..models import Project, ProjectStats, to_dict
from ..repository import note_repo, project_repo, task_repo
from ..repository.project_repo import DEFAULT_PROJECT_COLOR

logger = logging.getLogger(__name__)


def list_projects(db: Database, include_archived: bool = True) -> list[Project]:
    with db.connection() as conn:
        return [Project.from_row(r) for r in project_repo.list_all(conn, include_archived)]


def get_project(db: Database, project_id: str) -> Project | None:
    with db.connection() as conn:
        row = project_repo.get_one(conn, project_id)
    return Project.from_row(row) if row else None


def create_project(
    db: Database,
    name: str,
    description: str | None = None,
    color: str | None = None,
    log: LogContext | None = None,
) -> Project:
    project_id = new_id()
    now = to_rfc3339(utc_now())
    with db.connection() as conn:
        project_repo.insert(conn, project_id, name, description, color or DEFAULT_PROJECT_COLOR, now)
        project = Project.from_row(project_repo.get_one(conn, project_id))
    if log:
        log.set_entity("PROJECT", project_id)
        log.set_after(to_dict(project))
    return project


def update_project(
    db: Database,
    project_id: str,
    *,
    name: str | None = None,
    description: str | None = None,
    color: str | None = None,
    is_archived: bool | None = None,
    log: LogContext | None = None,
) -> Project:
    fields = [("name", name), ("description", description), ("color", color), ("is_archived", is_archived)]
    with db.transaction() as conn:
        before = project_repo.get_one(conn, project_id)
        if before is None:
            raise NotFoundError("project", project_id)
        project_repo.update(conn, project_id, fields)
        project = Project.from_row(project_repo.get_one(conn, project_id))
    if log:
        log.set_entity("PROJECT", project_id)
        log.set_before(dict(before))
        log.set_after(to_dict(project))
    return project


def archive_project(db: Database, project_id: str, log: LogContext | None = None) -> Project:
    return update_project(db, project_id, is_archived=True, log=log)


def unarchive_project(db: Database, project_id: str, log: LogContext | None = None) -> Project:
    return update_project(db, project_id, is_archived=False, log=log)


def delete_project(db: Database, project_id: str, log: LogContext | None = None) -> int:
    """
    Delete a project together with its tasks in one transaction.
    Notes keep existing with project_id cleared. Returns the number of tasks removed.
    """
    with db.transaction() as conn:
        before = project_repo.get_one(conn, project_id)
        if before is None:
            raise NotFoundError("project", project_id)
        removed = task_repo.delete_by_project(conn, project_id)
        note_repo.clear_project(conn, project_id)
        project_repo.delete(conn, project_id)
    logger.info("deleted project %s with %d tasks", project_id, removed)
    if log:
        log.set_entity("PROJECT", project_id)
        log.set_before(dict(before))
        log.set_after({"tasks_deleted": removed})
    return removed


def get_project_stats(db: Database, project_id: str) -> ProjectStats:
    with db.connection() as conn:
        r = task_repo.stats_for_project(conn, project_id)
    return ProjectStats(
        total_tasks=int(r["total_tasks"]),
        completed_tasks=int(r["completed_tasks"]),
        pending_tasks=int(r["pending_tasks"]),
    )
