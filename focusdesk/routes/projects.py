from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ..db import Database
from ..errors import StorageError
from ..logs import LogContext
from ..services import project_svc
from .common import get_db, to_http

router = APIRouter()


class ProjectCreate(BaseModel):
    name: str
    description: str | None = None
    color: str | None = None


class ProjectUpdate(BaseModel):
    id: str
    name: str | None = None
    description: str | None = None
    color: str | None = None
    is_archived: bool | None = None


class ProjectId(BaseModel):
    id: str


@router.get("/api/projects/list")
def api_projects_list(include_archived: bool = True, db: Database = Depends(get_db)):
    try:
        return project_svc.list_projects(db, include_archived)
    except StorageError as e:
        raise to_http(e)


@router.get("/api/projects/get")
def api_projects_get(id: str = Query(...), db: Database = Depends(get_db)):
    try:
        project = project_svc.get_project(db, id)
    except StorageError as e:
        raise to_http(e)
    if project is None:
        raise HTTPException(status_code=404, detail=f"project_not_found: {id}")
    return project


@router.get("/api/projects/stats")
def api_projects_stats(id: str = Query(...), db: Database = Depends(get_db)):
    try:
        return project_svc.get_project_stats(db, id)
    except StorageError as e:
        raise to_http(e)


@router.post("/api/projects/create", status_code=201)
def api_projects_create(body: ProjectCreate, db: Database = Depends(get_db)):
    log = LogContext(db, "CREATE_PROJECT")
    log.set_payload(body.model_dump())
    try:
        project = project_svc.create_project(db, body.name, body.description, body.color, log=log)
        log.write("OK")
        return project
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)


@router.post("/api/projects/update")
def api_projects_update(body: ProjectUpdate, db: Database = Depends(get_db)):
    log = LogContext(db, "UPDATE_PROJECT")
    log.set_payload(body.model_dump())
    try:
        project = project_svc.update_project(
            db,
            body.id,
            name=body.name,
            description=body.description,
            color=body.color,
            is_archived=body.is_archived,
            log=log,
        )
        log.write("OK")
        return project
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)


@router.post("/api/projects/archive")
def api_projects_archive(body: ProjectId, db: Database = Depends(get_db)):
    log = LogContext(db, "ARCHIVE_PROJECT")
    log.set_payload(body.model_dump())
    try:
        project = project_svc.archive_project(db, body.id, log=log)
        log.write("OK")
        return project
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)


@router.post("/api/projects/unarchive")
def api_projects_unarchive(body: ProjectId, db: Database = Depends(get_db)):
    log = LogContext(db, "UNARCHIVE_PROJECT")
    log.set_payload(body.model_dump())
    try:
        project = project_svc.unarchive_project(db, body.id, log=log)
        log.write("OK")
        return project
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)


@router.post("/api/projects/delete")
def api_projects_delete(body: ProjectId, db: Database = Depends(get_db)):
    log = LogContext(db, "DELETE_PROJECT")
    log.set_payload(body.model_dump())
    try:
        removed = project_svc.delete_project(db, body.id, log=log)
        log.write("OK")
        return {"message": "ok", "tasks_deleted": removed}
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)
