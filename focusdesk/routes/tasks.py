from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ..db import Database
from ..errors import StorageError
from ..logs import LogContext
from ..services import task_svc
from .common import get_db, to_http

router = APIRouter()


class TaskCreate(BaseModel):
    title: str
    description: str | None = None
    priority: int | None = None
    due_date: str | None = None  # RFC 3339
    remind_at: str | None = None
    project_id: str | None = None
    parent_id: str | None = None


class TaskUpdate(BaseModel):
    id: str
    title: str | None = None
    description: str | None = None
    is_completed: bool | None = None
    priority: int | None = None
    due_date: str | None = None  # "" clears
    remind_at: str | None = None  # "" clears
    project_id: str | None = None  # "" clears


class TaskPosition(BaseModel):
    id: str
    position: int


class TaskMove(BaseModel):
    id: str
    parent_id: str | None = None


class TaskId(BaseModel):
    id: str


@router.get("/api/tasks/list")
def api_tasks_list(db: Database = Depends(get_db)):
    try:
        return task_svc.list_tasks(db)
    except StorageError as e:
        raise to_http(e)


@router.get("/api/tasks/get")
def api_tasks_get(id: str = Query(...), db: Database = Depends(get_db)):
    try:
        task = task_svc.get_task(db, id)
    except StorageError as e:
        raise to_http(e)
    if task is None:
        raise HTTPException(status_code=404, detail=f"task_not_found: {id}")
    return task


@router.get("/api/tasks/by-project")
def api_tasks_by_project(project_id: str = Query(...), db: Database = Depends(get_db)):
    try:
        return task_svc.get_tasks_by_project(db, project_id)
    except StorageError as e:
        raise to_http(e)


@router.get("/api/tasks/subtasks")
def api_tasks_subtasks(parent_id: str = Query(...), db: Database = Depends(get_db)):
    try:
        return task_svc.get_subtasks(db, parent_id)
    except StorageError as e:
        raise to_http(e)


@router.post("/api/tasks/create", status_code=201)
def api_tasks_create(body: TaskCreate, db: Database = Depends(get_db)):
    log = LogContext(db, "CREATE_TASK")
    log.set_payload(body.model_dump())
    try:
        task = task_svc.create_task(
            db,
            body.title,
            description=body.description,
            priority=body.priority,
            due_date=body.due_date,
            remind_at=body.remind_at,
            project_id=body.project_id,
            parent_id=body.parent_id,
            log=log,
        )
        log.write("OK")
        return task
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)


@router.post("/api/tasks/update")
def api_tasks_update(body: TaskUpdate, db: Database = Depends(get_db)):
    log = LogContext(db, "UPDATE_TASK")
    log.set_payload(body.model_dump())
    try:
        task = task_svc.update_task(
            db,
            body.id,
            title=body.title,
            description=body.description,
            is_completed=body.is_completed,
            priority=body.priority,
            due_date=body.due_date,
            remind_at=body.remind_at,
            project_id=body.project_id,
            log=log,
        )
        log.write("OK")
        return task
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)


@router.post("/api/tasks/toggle")
def api_tasks_toggle(body: TaskId, db: Database = Depends(get_db)):
    log = LogContext(db, "TOGGLE_TASK")
    log.set_payload(body.model_dump())
    try:
        task = task_svc.toggle_task_complete(db, body.id, log=log)
        log.write("OK")
        return task
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)


@router.post("/api/tasks/position")
def api_tasks_position(body: TaskPosition, db: Database = Depends(get_db)):
    log = LogContext(db, "UPDATE_TASK_POSITION")
    log.set_payload(body.model_dump())
    try:
        task = task_svc.update_task_position(db, body.id, body.position, log=log)
        log.write("OK")
        return task
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)


@router.post("/api/tasks/move")
def api_tasks_move(body: TaskMove, db: Database = Depends(get_db)):
    log = LogContext(db, "MOVE_TASK")
    log.set_payload(body.model_dump())
    try:
        task = task_svc.move_task_to_parent(db, body.id, body.parent_id, log=log)
        log.write("OK")
        return task
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)


@router.post("/api/tasks/delete")
def api_tasks_delete(body: TaskId, db: Database = Depends(get_db)):
    log = LogContext(db, "DELETE_TASK")
    log.set_payload(body.model_dump())
    try:
        task_svc.delete_task(db, body.id, log=log)
        log.write("OK")
        return {"message": "ok"}
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)
