from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from ..db import Database
from ..errors import StorageError
from ..logs import LogContext
from ..services import kanban_svc
from .common import get_db, to_http

router = APIRouter()


class ColumnCreate(BaseModel):
    project_id: str
    name: str
    color: str | None = None


class ColumnUpdate(BaseModel):
    id: str
    name: str | None = None
    color: str | None = None
    position: int | None = None


class ColumnId(BaseModel):
    id: str


class TaskPlacement(BaseModel):
    task_id: str
    column_id: str
    position: int | None = None


@router.get("/api/kanban/columns")
def api_kanban_columns(project_id: str = Query(...), db: Database = Depends(get_db)):
    try:
        return kanban_svc.get_columns(db, project_id)
    except StorageError as e:
        raise to_http(e)


@router.get("/api/kanban/column/tasks")
def api_kanban_column_tasks(column_id: str = Query(...), db: Database = Depends(get_db)):
    try:
        return kanban_svc.get_column_tasks(db, column_id)
    except StorageError as e:
        raise to_http(e)


@router.post("/api/kanban/column/create", status_code=201)
def api_kanban_column_create(body: ColumnCreate, db: Database = Depends(get_db)):
    log = LogContext(db, "CREATE_KANBAN_COLUMN")
    log.set_payload(body.model_dump())
    try:
        column = kanban_svc.create_column(db, body.project_id, body.name, body.color, log=log)
        log.write("OK")
        return column
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)


@router.post("/api/kanban/column/update")
def api_kanban_column_update(body: ColumnUpdate, db: Database = Depends(get_db)):
    log = LogContext(db, "UPDATE_KANBAN_COLUMN")
    log.set_payload(body.model_dump())
    try:
        column = kanban_svc.update_column(
            db, body.id, name=body.name, color=body.color, position=body.position, log=log
        )
        log.write("OK")
        return column
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)


@router.post("/api/kanban/column/delete")
def api_kanban_column_delete(body: ColumnId, db: Database = Depends(get_db)):
    log = LogContext(db, "DELETE_KANBAN_COLUMN")
    log.set_payload(body.model_dump())
    try:
        kanban_svc.delete_column(db, body.id, log=log)
        log.write("OK")
        return {"message": "ok"}
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)


@router.post("/api/kanban/move")
def api_kanban_move(body: TaskPlacement, db: Database = Depends(get_db)):
    log = LogContext(db, "MOVE_TASK_TO_COLUMN")
    log.set_payload(body.model_dump())
    try:
        placed = kanban_svc.move_task_to_column(db, body.task_id, body.column_id, body.position, log=log)
        log.write("OK")
        return placed
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)
